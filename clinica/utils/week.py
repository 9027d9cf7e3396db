from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Literal
from zoneinfo import ZoneInfo

DEFAULT_TZ = ZoneInfo("America/Sao_Paulo")

# a clínica não atende aos domingos: a semana da agenda é seg→sáb
WEEK_DAYS = 6

WindowMode = Literal["week", "day"]

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def monday_of_week(d: date) -> date:
    """Segunda-feira da semana de d (domingo pertence à semana que termina nele)."""
    return d - timedelta(days=d.weekday())


def window_days(anchor: date, mode: WindowMode = "week") -> list[date]:
    """Dias exibidos na grade: 6 dias a partir da segunda (week) ou só o anchor (day)."""
    if mode == "day":
        return [anchor]
    start = monday_of_week(anchor)
    return [start + timedelta(days=i) for i in range(WEEK_DAYS)]


def month_key(d: date) -> str:
    """'YYYY-MM' a partir de uma data."""
    return d.strftime("%Y-%m")


def parse_month_key(value: str) -> tuple[int, int]:
    m = _MONTH_KEY_RE.match(value or "")
    if not m:
        raise ValueError(f"Mês inválido: {value!r} (use YYYY-MM)")
    return int(m.group(1)), int(m.group(2))


def month_bounds(key: str) -> tuple[date, date]:
    """Primeiro e último dia reais do mês (ex.: 2025-02 -> 2025-02-01, 2025-02-28)."""
    year, month = parse_month_key(key)
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def today_local(tz: ZoneInfo = DEFAULT_TZ) -> date:
    return datetime.now(tz).date()


def current_month_key(tz: ZoneInfo = DEFAULT_TZ) -> str:
    return month_key(today_local(tz))
