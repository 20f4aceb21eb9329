from __future__ import annotations

import os
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


DEFAULT_TIMEZONE = "UTC"
DEFAULT_HOME_CURRENCY = "INR"
DEFAULT_CURRENCY_SYMBOL = "₹"


def app_timezone() -> ZoneInfo:
    name = (os.getenv("APP_TIMEZONE") or DEFAULT_TIMEZONE).strip()
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError as exc:
        raise RuntimeError(f"APP_TIMEZONE is not a known timezone: {name}") from exc


def home_currency() -> str:
    return (os.getenv("HOME_CURRENCY") or DEFAULT_HOME_CURRENCY).strip().upper()


def currency_symbol() -> str:
    return os.getenv("CURRENCY_SYMBOL") or DEFAULT_CURRENCY_SYMBOL


def local_now(now: Optional[datetime] = None) -> datetime:
    """
    Naive wall-clock "now" in APP_TIMEZONE, comparable with stored
    transaction timestamps. Aware inputs are converted, naive ones are
    taken as already local.
    """
    if now is None:
        return datetime.now(app_timezone()).replace(tzinfo=None)
    if now.tzinfo is not None:
        return now.astimezone(app_timezone()).replace(tzinfo=None)
    return now

