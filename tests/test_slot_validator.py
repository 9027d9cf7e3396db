from dataclasses import dataclass
from datetime import date

import pytest

from clinica.core.errors import SlotConflict
from clinica.models.appointment import AppointmentStatus
from clinica.services.slot_validator import (
    SlotCandidate,
    active_appointments,
    ensure_slot_free,
    validate_slot,
)
from conftest import MONDAY, make_appointment

D = date(2030, 3, 5)


@dataclass
class Row:
    id: str
    date: date
    time: str
    room: int
    professional_id: str
    client_id: str | None = None
    status: AppointmentStatus = AppointmentStatus.SCHEDULED


def test_room_conflict_wins_over_other_reasons():
    existing = [Row("a1", D, "08:00", 1, "p1", "c1")]
    cand = SlotCandidate(D, "08:00", 1, "p1", "c1")
    assert validate_slot(cand, existing) == (False, "room")


def test_professional_conflict_in_other_room():
    existing = [Row("a1", D, "08:00", 1, "p1", "c1")]
    cand = SlotCandidate(D, "08:00", 2, "p1", "c2")
    assert validate_slot(cand, existing) == (False, "professional")


def test_client_conflict_in_other_room_with_other_professional():
    existing = [Row("a1", D, "08:00", 1, "p1", "c1")]
    cand = SlotCandidate(D, "08:00", 2, "p2", "c1")
    assert validate_slot(cand, existing) == (False, "client")


def test_two_sublets_without_client_do_not_conflict():
    existing = [Row("a1", D, "08:00", 1, "p1", None)]
    cand = SlotCandidate(D, "08:00", 2, "p2", "")
    assert validate_slot(cand, existing) == (True, None)


def test_other_time_or_day_is_free():
    existing = [Row("a1", D, "08:00", 1, "p1", "c1")]
    assert validate_slot(SlotCandidate(D, "09:00", 1, "p1", "c1"), existing) == (True, None)
    assert validate_slot(
        SlotCandidate(date(2030, 3, 6), "08:00", 1, "p1", "c1"), existing
    ) == (True, None)


def test_ignore_id_excludes_the_record_being_edited():
    existing = [Row("a1", D, "08:00", 1, "p1", "c1")]
    cand = SlotCandidate(D, "08:00", 1, "p1", "c1")
    assert validate_slot(cand, existing, ignore_id="a1") == (True, None)


def test_time_compared_by_hh_mm_prefix():
    existing = [Row("a1", D, "08:00:00", 3, "p1")]
    assert validate_slot(SlotCandidate(D, "08:00", 3, "p2"), existing) == (False, "room")


def test_active_filter_drops_rows_of_deleted_entities():
    rows = [
        Row("a1", D, "08:00", 1, "p1", "c1"),
        Row("a2", D, "08:00", 2, "gone", "c1"),
        Row("a3", D, "08:00", 3, "p1", "gone"),
        Row("a4", D, "08:00", 4, "p1", None),
    ]
    active = active_appointments(rows, ["p1"], ["c1"])
    assert [r.id for r in active] == ["a1", "a4"]


def test_ensure_slot_free_reads_the_database(db_session, prof_a, prof_b, client_x):
    make_appointment(db_session, professional=prof_a, d=MONDAY, hhmm="10:00", room=2)

    with pytest.raises(SlotConflict) as exc:
        ensure_slot_free(db_session, SlotCandidate(MONDAY, "10:00", 2, prof_b.id, ""))
    assert exc.value.reason == "room"

    with pytest.raises(SlotConflict) as exc:
        ensure_slot_free(
            db_session, SlotCandidate(MONDAY, "10:00", 3, prof_a.id, client_x.id)
        )
    assert exc.value.reason == "professional"

    # outro horário: livre
    ensure_slot_free(db_session, SlotCandidate(MONDAY, "11:00", 2, prof_b.id, ""))
