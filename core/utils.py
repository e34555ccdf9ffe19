from __future__ import annotations

import math
from typing import Any, Optional

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta


def resolve_as_of(as_of_date: Optional[pd.Timestamp]) -> pd.Timestamp:
    """Normalized as-of date; today when none is given."""
    if as_of_date is None or pd.isna(as_of_date):
        return pd.Timestamp.today().normalize()
    return pd.Timestamp(as_of_date).normalize()


def month_start(ts: pd.Timestamp) -> pd.Timestamp:
    return pd.Timestamp(ts).to_period("M").to_timestamp(how="start")


def shift_months(ts: pd.Timestamp, months: int) -> pd.Timestamp:
    """Calendar-month shift (negative to go back), keeping month-start alignment."""
    return pd.Timestamp(month_start(ts).to_pydatetime() + relativedelta(months=months))


def seasonal_history_factor(month: int) -> float:
    """
    Sinusoid over calendar month used for reconstructed history.
    Peaks in April (tax refunds), bottoms out in October, December sits
    below the line (holiday spending).
    """
    return float(np.sin(2.0 * np.pi * (month - 1) / 12.0))


def seasonal_spending_factor(month: int) -> float:
    """Variable-spending multiplier offset: +1 in December, -1 in June."""
    return float(np.cos(2.0 * np.pi * (month % 12) / 12.0))


def to_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Lenient float parse for form values ("1,200", "$500", " 3.5 ")."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float, np.integer, np.floating)):
        out = float(value)
        return out if math.isfinite(out) else default
    text = str(value).strip().replace(",", "").replace("$", "")
    if not text:
        return default
    try:
        out = float(text)
    except ValueError:
        return default
    return out if math.isfinite(out) else default


def ceil_div(numerator: float, denominator: float) -> int:
    """Whole periods needed to cover numerator at denominator per period."""
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    if numerator <= 0:
        return 0
    return int(math.ceil(numerator / denominator - 1e-9))
