from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Generic, TypeVar

from clinica.models.appointment import (
    ROOMS,
    STATUS_BG,
    TIME_SLOTS,
    AppointmentStatus,
)
from clinica.services.slot_validator import SlotRow
from clinica.utils.week import WindowMode, window_days

HIDDEN_BG = "#f3f3f3"  # ocupado, mas fora do filtro de profissional
OTHER_BG = "#6b7280"  # painel do profissional: ocupado por outro profissional
FREE_BG = "#ffffff"
FREE_STRIPE_BG = "#fbfdff"

SlotKey = tuple[date, str, int]  # (data, horário, sala)

T = TypeVar("T", bound=SlotRow)


@dataclass
class AgendaGrid(Generic[T]):
    """Projeção da lista plana de agendamentos em dia x sala x horário."""

    days: list[date]
    rooms: tuple[int, ...]
    time_slots: tuple[str, ...]
    cells: dict[SlotKey, T] = field(default_factory=dict)
    # total de realizados por (dia, sala): linha de rodapé
    totals: dict[date, dict[int, int]] = field(default_factory=dict)
    window_total: int = 0

    def cell(self, d: date, hhmm: str, room: int) -> T | None:
        return self.cells.get((d, hhmm[:5], room))


def project(
    appointments: Iterable[T],
    window_start: date,
    window_length: int,
    rooms: Sequence[int] = ROOMS,
    time_slots: Sequence[str] = TIME_SLOTS,
    professional_id: str | None = None,
) -> AgendaGrid[T]:
    """
    Monta a grade da janela [window_start, window_start + window_length).
    `appointments` já deve vir filtrado por vínculos ativos. O filtro de
    profissional afeta apenas os totais; as células continuam ocupadas.
    """
    days = [window_start + timedelta(days=i) for i in range(window_length)]
    grid: AgendaGrid[T] = AgendaGrid(
        days=days,
        rooms=tuple(rooms),
        time_slots=tuple(t[:5] for t in time_slots),
        totals={d: {r: 0 for r in rooms} for d in days},
    )
    day_set = set(days)
    slot_set = set(grid.time_slots)
    room_set = set(grid.rooms)

    for a in appointments:
        hhmm = a.time[:5]
        if a.date not in day_set or a.room not in room_set or hhmm not in slot_set:
            continue
        grid.cells.setdefault((a.date, hhmm, a.room), a)
        if a.status != AppointmentStatus.DONE:
            continue
        if professional_id and a.professional_id != professional_id:
            continue
        grid.totals[a.date][a.room] += 1
        grid.window_total += 1
    return grid


def project_window(
    appointments: Iterable[T],
    anchor: date,
    mode: WindowMode = "week",
    professional_id: str | None = None,
) -> AgendaGrid[T]:
    """Semana seg→sáb contendo `anchor` (mode="week") ou só o dia (mode="day")."""
    days = window_days(anchor, mode)
    return project(appointments, days[0], len(days), professional_id=professional_id)


def admin_cell_color(
    appointment: SlotRow | None, day_index: int, professional_filter: str | None
) -> tuple[bool, str]:
    """(visível, cor de fundo) de uma célula na grade do admin."""
    visible = not professional_filter or (
        appointment is not None and appointment.professional_id == professional_filter
    )
    if appointment is not None and visible:
        return True, STATUS_BG[appointment.status]
    if not visible:
        return False, HIDDEN_BG
    return True, FREE_STRIPE_BG if day_index % 2 == 0 else FREE_BG


def professional_cell_color(
    appointment: SlotRow | None, me: str, client_filter: str | None
) -> tuple[bool, str]:
    """
    (mostra detalhes, cor) na grade do profissional: os meus pela cor do status,
    de outro profissional em cinza; com filtro de cliente os demais ficam em branco.
    """
    if appointment is None:
        return False, FREE_BG
    if appointment.professional_id != me:
        return False, OTHER_BG
    if client_filter and (appointment.client_id or "") != client_filter:
        return False, FREE_BG
    return True, STATUS_BG[appointment.status]
