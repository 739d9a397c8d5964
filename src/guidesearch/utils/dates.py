"""Date formatting for guide listings."""

from __future__ import annotations

from datetime import date, datetime


def _parse(value: str | date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value.strip().replace("Z", "+00:00")).date()


def _relative(target: date, today: date) -> str:
    days = (today - target).days
    if days >= 365:
        return f"{days // 365}y ago"
    if days >= 30:
        return f"{days // 30}mo ago"
    if days > 0:
        return f"{days}d ago"
    return "today"


def format_date(
    value: str | date,
    *,
    include_relative: bool = False,
    day_month: bool = False,
    today: date | None = None,
) -> str:
    """Format an ISO date as ``January 5, 2024``.

    Relative labels count elapsed days (30 per month, 365 per year), so a
    date one day before New Year reads ``1d ago`` rather than ``1y ago``.
    """
    target = _parse(value)
    if include_relative:
        reference = today or date.today()
        full = f"{target:%B} {target.day}, {target.year}"
        return f"{full} ({_relative(target, reference)})"
    if day_month:
        return f"{target:%B} {target.day}"
    return f"{target:%B} {target.day}, {target.year}"
