"""Serializa a grade (AgendaGrid) nos formatos do admin e do profissional."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from clinica.models.appointment import Appointment
from clinica.schemas.agenda import (
    GridCellOut,
    GridDayTotalsOut,
    GridOut,
    GridRowOut,
    to_out,
)
from clinica.services.grid import AgendaGrid, admin_cell_color, professional_cell_color

# (agendamento ou None, índice do dia) -> (mostra, cor)
CellPainter = Callable[[Appointment | None, int], tuple[bool, str]]


def render_grid(
    grid: AgendaGrid[Appointment], anchor: date, mode: str, paint: CellPainter
) -> GridOut:
    rows: list[GridRowOut] = []
    for day_index, d in enumerate(grid.days):
        for hhmm in grid.time_slots:
            cells = []
            for room in grid.rooms:
                ap = grid.cell(d, hhmm, room)
                shown, color = paint(ap, day_index)
                cells.append(
                    GridCellOut(
                        room=room,
                        visible=shown,
                        color=color,
                        appointment=to_out(ap) if ap is not None and shown else None,
                    )
                )
            rows.append(GridRowOut(day=d, time=hhmm, cells=cells))

    return GridOut(
        anchor=anchor,
        mode=mode,
        days=grid.days,
        rooms=list(grid.rooms),
        time_slots=list(grid.time_slots),
        rows=rows,
        totals=[
            GridDayTotalsOut(day=d, by_room=grid.totals.get(d, {})) for d in grid.days
        ],
        window_total=grid.window_total,
    )


def admin_painter(professional_filter: str | None) -> CellPainter:
    def paint(ap: Appointment | None, day_index: int) -> tuple[bool, str]:
        return admin_cell_color(ap, day_index, professional_filter)

    return paint


def professional_painter(me: str, client_filter: str | None) -> CellPainter:
    def paint(ap: Appointment | None, _day_index: int) -> tuple[bool, str]:
        return professional_cell_color(ap, me, client_filter)

    return paint
