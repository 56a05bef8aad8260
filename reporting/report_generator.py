"""HTML portfolio report.

Assembles metrics, charts and tables for one snapshot into a self-contained
HTML document. Rows come from ``analyzers.tables`` so the report matches the
live tables and the spreadsheet export row for row.
"""

import logging
import os
from datetime import datetime
from html import escape

import plotly.io as pio

import config
from analyzers.allocation import allocation_by_position
from analyzers.metrics import compute_metrics
from analyzers.tables import (
    ACTIVE_COLUMNS, ACTIVITY_COLUMNS, CLOSED_COLUMNS, SLUG,
    active_position_rows, activity_rows, closed_position_rows,
)
from analyzers.volume import daily_volume
from analyzers.winners_losers import winners_and_losers
from dashboard.address import trunc_addr
from reporting import charts
from reporting.formatting import (
    MISSING, export_filename, format_date, format_pct, format_rank, format_usd,
    market_url, profile_url,
)

logger = logging.getLogger(__name__)

USD_COLUMNS = {"Value", "P&L", "Realized P&L", "USDC"}
PCT_COLUMNS = {"P&L %", "Return %"}
PRICE_COLUMNS = {"Avg Price", "Current Price", "Price"}
DATE_COLUMNS = {"End Date", "Closed"}


# ── Helpers ──

def _chart(fig):
    """Convert a Plotly figure to an embeddable HTML div."""
    if fig is None:
        return '<p class="muted">Chart not available for this dataset.</p>'
    return pio.to_html(fig, full_html=False, include_plotlyjs=False)


def _metric_card(value, label, tone=''):
    return (f'<div class="metric-card {tone}">'
            f'<div class="value">{value}</div>'
            f'<div class="label">{label}</div></div>')


def _tone(value):
    if value > 0:
        return 'positive'
    if value < 0:
        return 'negative'
    return ''


def _cell(column, value, slug=None):
    if value is None or value == '':
        return MISSING if column not in ('Side', 'Outcome') else ''
    if column in USD_COLUMNS:
        return f'<span class="{_tone(value)}">{format_usd(value)}</span>'
    if column in PCT_COLUMNS:
        return f'<span class="{_tone(value)}">{value:+.1f}%</span>'
    if column in PRICE_COLUMNS:
        return f'{value:.3f}'
    if column in DATE_COLUMNS:
        return format_date(value)
    if column == 'Market' and slug:
        return f'<a href="{escape(market_url(slug))}">{escape(str(value))}</a>'
    if isinstance(value, datetime):
        return value.strftime('%Y-%m-%d %H:%M')
    if isinstance(value, float):
        return f'{value:,.2f}'
    return escape(str(value))


def _table(headers, rows):
    hdr = ''.join(f'<th>{h}</th>' for h in headers)
    body = ''
    for row in rows:
        cells = ''.join(f'<td>{_cell(h, row.get(h), row.get(SLUG))}</td>' for h in headers)
        body += f'<tr>{cells}</tr>\n'
    return f'<table><thead><tr>{hdr}</tr></thead><tbody>{body}</tbody></table>'


def _section(id_, title, content):
    return (f'<div class="section" id="{id_}">'
            f'<h2>{title}</h2>{content}</div>\n')


def _empty(text):
    return f'<p class="muted">{text}</p>'


# ── Section Builders ──

def _section_summary(metrics):
    if metrics is None:
        return _section('summary', 'Summary', _empty('Metrics not available.'))
    cards = (
        _metric_card(format_rank(metrics.rank), 'Leaderboard Rank')
        + _metric_card(format_usd(metrics.total_value), 'Total Value')
        + _metric_card(format_usd(metrics.unrealized_pnl), 'Unrealized P&L',
                       _tone(metrics.unrealized_pnl))
        + _metric_card(format_usd(metrics.realized_pnl), 'Realized P&L',
                       _tone(metrics.realized_pnl))
        + _metric_card(format_pct(metrics.return_pct), 'Return',
                       _tone(metrics.return_pct))
        + _metric_card(f'{metrics.win_rate * 100:.1f}%', 'Win Rate')
        + _metric_card(f'{metrics.active_count:,}', 'Active Positions')
        + _metric_card(f'{metrics.closed_count:,}', 'Closed Positions')
    )
    return _section('summary', 'Summary', f'<div class="metric-grid">{cards}</div>')


def _section_charts(snapshot):
    winners, losers = winners_and_losers(snapshot.positions, snapshot.closed_positions)
    alloc = charts.allocation_doughnut(allocation_by_position(snapshot.positions))
    volume = charts.trade_volume(daily_volume(snapshot.trades))
    return _section('charts', 'Allocation &amp; Performance', f'''
        <div class="chart-container">{_chart(alloc)}</div>
        <div class="two-col">
            <div class="chart-container">{_chart(charts.winners_bar(winners))}</div>
            <div class="chart-container">{_chart(charts.losers_bar(losers))}</div>
        </div>
        <div class="chart-container">{_chart(volume)}</div>
    ''')


def _section_rows(id_, title, columns, rows, empty_text):
    count = f'<p class="muted">{len(rows):,} row{"s" if len(rows) != 1 else ""}</p>'
    content = _table(columns, rows) if rows else _empty(empty_text)
    return _section(id_, title, count + content)


def generate_report(snapshot, output_dir=config.OUTPUT_DIR):
    """Write the HTML report for ``snapshot`` and return its path."""
    metrics = compute_metrics(snapshot)

    sections = (
        _section_summary(metrics)
        + _section_charts(snapshot)
        + _section_rows('active', 'Active Positions', ACTIVE_COLUMNS,
                        active_position_rows(snapshot.positions),
                        'No active positions.')
        + _section_rows('closed', 'Closed Positions', CLOSED_COLUMNS,
                        closed_position_rows(snapshot.closed_positions),
                        'No closed positions.')
        + _section_rows('activity', 'Activity', ACTIVITY_COLUMNS,
                        activity_rows(snapshot.activity),
                        'No activity found.')
    )

    html = _html_template(snapshot.address, sections)

    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, export_filename(snapshot.address, 'html'))
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(html)

    logger.info("Report written to %s", output_path)
    return output_path


def _html_template(address, body_sections):
    """Full HTML document with inline CSS and Plotly CDN."""
    generated = datetime.now().strftime('%Y-%m-%d %H:%M')
    return f'''<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Portfolio: {trunc_addr(address)}</title>
    <script src="https://cdn.plot.ly/plotly-2.35.2.min.js"></script>
    <style>
        * {{ box-sizing: border-box; }}
        body {{
            font-family: 'IBM Plex Mono', Consolas, monospace;
            background: #f5f2ed;
            color: #1e293b;
            line-height: 1.6;
            margin: 0;
        }}
        .header {{
            background: #1e293b;
            color: white;
            padding: 40px 0 32px;
        }}
        .header h1 {{ font-size: 26px; margin: 0; }}
        .header a {{ color: #cbd5e1; font-size: 14px; }}
        .container {{
            max-width: 1100px;
            margin: 0 auto;
            padding: 0 24px;
        }}
        nav.toc {{
            background: white;
            border-bottom: 1px solid #e2e8f0;
            padding: 12px 0;
            position: sticky;
            top: 0;
            z-index: 100;
        }}
        nav.toc .container {{ display: flex; gap: 20px; flex-wrap: wrap; }}
        nav.toc a {{
            color: #475569;
            text-decoration: none;
            font-size: 13px;
        }}
        .content {{ padding: 24px 0 48px; }}
        .section {{
            background: white;
            border-radius: 8px;
            padding: 28px;
            margin-bottom: 20px;
            box-shadow: 0 1px 3px rgba(0,0,0,0.06);
        }}
        .section h2 {{
            font-size: 18px;
            margin: 0 0 16px;
            padding-bottom: 10px;
            border-bottom: 2px solid #f1f5f9;
        }}
        .metric-grid {{
            display: grid;
            grid-template-columns: repeat(4, 1fr);
            gap: 14px;
        }}
        .metric-card {{
            background: #f1f5f9;
            border-radius: 8px;
            padding: 16px;
            text-align: center;
        }}
        .metric-card .value {{ font-size: 22px; font-weight: 700; }}
        .metric-card .label {{
            font-size: 11px;
            text-transform: uppercase;
            letter-spacing: 0.5px;
            color: #64748b;
        }}
        .positive {{ color: #2D8A54; }}
        .negative {{ color: #C0503A; }}
        table {{
            width: 100%;
            border-collapse: collapse;
            margin: 12px 0;
            font-size: 12px;
        }}
        th {{
            background: #f8fafc;
            text-align: left;
            padding: 8px 12px;
            color: #475569;
            border-bottom: 2px solid #e2e8f0;
        }}
        td {{
            padding: 7px 12px;
            border-bottom: 1px solid #f1f5f9;
        }}
        .chart-container {{ margin: 16px 0; }}
        .two-col {{
            display: grid;
            grid-template-columns: 1fr 1fr;
            gap: 20px;
        }}
        .muted {{ color: #94a3b8; font-style: italic; font-size: 13px; }}
        footer {{
            text-align: center;
            padding: 32px;
            color: #94a3b8;
            font-size: 12px;
        }}
        @media (max-width: 768px) {{
            .metric-grid {{ grid-template-columns: repeat(2, 1fr); }}
            .two-col {{ grid-template-columns: 1fr; }}
        }}
    </style>
</head>
<body>

<div class="header">
    <div class="container">
        <h1>Portfolio</h1>
        <a href="{profile_url(address)}">{address}</a>
    </div>
</div>

<nav class="toc">
    <div class="container">
        <a href="#summary">Summary</a>
        <a href="#charts">Charts</a>
        <a href="#active">Active</a>
        <a href="#closed">Closed</a>
        <a href="#activity">Activity</a>
    </div>
</nav>

<div class="content">
    <div class="container">
        {body_sections}
    </div>
</div>

<footer>
    <div class="container">
        Generated {generated} &mdash; {address}
    </div>
</footer>

</body>
</html>'''
