"""
Billing date arithmetic

Calendar months and years are added by clamping the day to the end of the
target month (Jan 31 + 1 month = Feb 28/29, Feb 29 + 1 year = Feb 28).
"""

import calendar
from datetime import datetime, timedelta
from typing import Callable, Dict

from .models import BillingCycle


def add_months(start: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length"""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


def add_years(start: datetime, years: int) -> datetime:
    return add_months(start, 12 * years)


_CYCLE_STEP: Dict[BillingCycle, Callable[[datetime], datetime]] = {
    BillingCycle.WEEKLY: lambda start: start + timedelta(days=7),
    BillingCycle.MONTHLY: lambda start: add_months(start, 1),
    BillingCycle.ANNUALLY: lambda start: add_years(start, 1),
}

# Every cycle must have a step
_missing = set(BillingCycle) - set(_CYCLE_STEP)
if _missing:
    raise RuntimeError(f"No billing step for: {sorted(c.value for c in _missing)}")


def add_billing_cycle(start: datetime, cycle: BillingCycle) -> datetime:
    """Date one billing cycle after ``start``"""
    try:
        step = _CYCLE_STEP[BillingCycle(cycle)]
    except ValueError:
        raise ValueError(f"Unknown billing cycle: {cycle!r}")
    return step(start)


def trial_end(start: datetime, trial_days: int) -> datetime:
    if trial_days < 0:
        raise ValueError("trial_days must be >= 0")
    return start + timedelta(days=trial_days)


__all__ = ["add_months", "add_years", "add_billing_cycle", "trial_end"]
