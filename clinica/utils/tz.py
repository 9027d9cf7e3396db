from __future__ import annotations

from datetime import date, datetime, time
from functools import lru_cache
from zoneinfo import ZoneInfo

from clinica.core.settings import settings


@lru_cache
def clinic_tz() -> ZoneInfo:
    return ZoneInfo(settings.CLINIC_TZ)


def slot_start_local(d: date, hhmm: str, tz: ZoneInfo | None = None) -> datetime:
    """
    Combina data + 'HH:MM' de um slot na TZ da clínica (aware).
    Útil para comparar slots com "agora".
    """
    tz = tz or clinic_tz()
    hh, mm = (int(x) for x in hhmm[:5].split(":"))
    return datetime.combine(d, time(hh, mm)).replace(tzinfo=tz)


def now_local(tz: ZoneInfo | None = None) -> datetime:
    return datetime.now(tz or clinic_tz())
