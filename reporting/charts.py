"""Plotly chart functions for the portfolio report.

Each function takes analyzer output and returns a plotly Figure.
Returns None if data is insufficient.
"""

import plotly.graph_objects as go

from analyzers.allocation import allocation_shares
from reporting.formatting import format_usd

# ── Consistent palette ──
COLORS = {
    'primary': '#2563eb',
    'positive': '#2D8A54',
    'negative': '#C0503A',
    'amber': '#A06830',
    'amber_muted': '#C4A070',
    'neutral': '#6b7280',
    'dark': '#1e293b',
}
SLICE_COLORS = [
    '#C0503A', '#2D8A54', '#7B6250', '#4A7A8A', '#A06830',
    '#6A8A5B', '#8B5E6E', '#5A7060', '#B07848', '#5B7E90',
    '#9A7040', '#507A6A', '#8A6878', '#6A9070', '#C47050',
    '#3A7A5A', '#7A6A58', '#5890A0', '#A88050', '#688068',
]
BAR_LABEL_LEN = 22


def _layout(title, height=420, **kwargs):
    """Standard layout options."""
    layout = dict(
        title=dict(text=title, font=dict(size=15, color='#1e293b')),
        template='plotly_white',
        margin=dict(l=60, r=40, t=50, b=50),
        font=dict(family="'IBM Plex Mono', Consolas, monospace",
                  size=11, color='#374151'),
        height=height,
        plot_bgcolor='white',
    )
    layout.update(kwargs)
    return layout


# ── 1. Allocation by Position ──

def allocation_doughnut(buckets):
    """Doughnut of current value per position, long tail folded into Other."""
    if not buckets:
        return None
    shares = allocation_shares(buckets)
    fig = go.Figure(go.Pie(
        labels=[b.label for b in buckets],
        values=[b.value for b in buckets],
        hole=0.55,
        sort=False,
        marker=dict(colors=SLICE_COLORS[:len(buckets)],
                    line=dict(color='white', width=2)),
        customdata=[[b.full_label, format_usd(b.value), f'{s * 100:.1f}%']
                    for b, s in zip(buckets, shares)],
        hovertemplate='%{customdata[0]}<br>%{customdata[1]} (%{customdata[2]})'
                      '<extra></extra>',
        textinfo='percent',
    ))
    fig.update_layout(**_layout('Allocation by Position', height=460,
                                legend=dict(font=dict(size=10))))
    return fig


# ── 2. Winners / Losers ──

def _movers_bar(markets, title, color):
    if not markets:
        return None
    fig = go.Figure(go.Bar(
        x=[m.pnl for m in markets],
        y=[m.title[:BAR_LABEL_LEN] for m in markets],
        orientation='h',
        marker_color=color,
        customdata=[[m.title, format_usd(m.pnl)] for m in markets],
        hovertemplate='%{customdata[0]}<br>%{customdata[1]}<extra></extra>',
    ))
    fig.update_layout(**_layout(title, height=320, showlegend=False,
                                xaxis_title='P&L ($)'))
    fig.update_yaxes(autorange='reversed', tickfont=dict(size=10))
    return fig


def winners_bar(winners):
    """Top markets by combined realized + unrealized P&L."""
    return _movers_bar(winners, 'Top Winners', COLORS['positive'])


def losers_bar(losers):
    """Worst markets by combined realized + unrealized P&L."""
    return _movers_bar(losers, 'Top Losers', COLORS['negative'])


# ── 3. Daily Trade Volume ──

def trade_volume(daily):
    """Daily notional volume with the trailing average overlaid."""
    if daily is None or daily.empty:
        return None
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=daily.index, y=daily['volume'], name='Daily Volume',
        mode='lines', fill='tozeroy',
        line=dict(color=COLORS['amber'], width=1.5, shape='spline'),
        fillcolor='rgba(160, 104, 48, 0.08)'))
    fig.add_trace(go.Scatter(
        x=daily.index, y=daily['ma'], name='7d Avg',
        mode='lines',
        line=dict(color=COLORS['amber_muted'], width=2, dash='dash')))
    fig.update_layout(**_layout('Daily Trade Volume',
                                xaxis_title='Date', yaxis_title='Volume ($)'))
    return fig
