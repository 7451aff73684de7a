from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "Asia/Jakarta"


def clock_time(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return now.strftime("%H:%M")


def real_time(tz: str = DEFAULT_TIMEZONE, now: datetime | None = None) -> str:
    zone = ZoneInfo(tz)
    moment = now.astimezone(zone) if now is not None else datetime.now(zone)
    return moment.strftime("%H:%M:%S %d-%m-%Y")


def format_date(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%d-%m-%Y")


def format_uptime(seconds: float) -> str:
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}h {minutes}m {secs}s"
