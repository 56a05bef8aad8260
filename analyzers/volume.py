"""Daily notional trade volume with a trailing moving average."""

from typing import Sequence

import numpy as np
import pandas as pd

import config
from storage.models import Trade


def moving_average(values: Sequence[float],
                   window: int = config.VOLUME_MA_WINDOW) -> pd.Series:
    """Trailing simple moving average, clipped at the start of the series.

    The first ``window - 1`` points average over however many days exist.
    """
    return pd.Series(values, dtype=float).rolling(window, min_periods=1).mean()


def daily_volume(trades: Sequence[Trade],
                 window: int = config.VOLUME_MA_WINDOW) -> pd.DataFrame:
    """Bucket fills by UTC calendar day.

    Returns a frame indexed by ``YYYY-MM-DD`` (ascending) with ``volume``
    (sum of |size x price|) and ``ma`` columns. Fills without a timestamp
    are left out. Days with no fills are not filled in.
    """
    rows = [(t.timestamp, t.size, t.price) for t in trades if t.timestamp > 0]
    if not rows:
        return pd.DataFrame({"volume": pd.Series(dtype=float),
                             "ma": pd.Series(dtype=float)})

    df = pd.DataFrame(rows, columns=["timestamp", "size", "price"])
    df["notional"] = np.abs(df["size"] * df["price"])
    df["day"] = pd.to_datetime(df["timestamp"], unit="s", utc=True).dt.strftime("%Y-%m-%d")

    daily = df.groupby("day")["notional"].sum().sort_index().to_frame("volume")
    daily["ma"] = moving_average(daily["volume"].tolist(), window).values
    daily.index.name = "day"
    return daily
