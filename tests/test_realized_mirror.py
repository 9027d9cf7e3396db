from datetime import date

from clinica.models.appointment import AppointmentStatus
from clinica.services import realized_mirror
from conftest import MONDAY, make_appointment

KEY = "2030-03"


def _counter(db, pid, key=KEY):
    db.expire_all()
    return realized_mirror.realized_in_month(db, pid, key)


def test_increment_creates_and_accumulates(db_session, prof_a):
    realized_mirror.increment(db_session, prof_a.id, KEY, +1)
    realized_mirror.increment(db_session, prof_a.id, KEY, +1)
    db_session.commit()
    assert _counter(db_session, prof_a.id) == 2

    realized_mirror.increment(db_session, prof_a.id, KEY, -1)
    db_session.commit()
    assert _counter(db_session, prof_a.id) == 1


def test_zero_delta_or_missing_ids_are_ignored(db_session, prof_a):
    realized_mirror.increment(db_session, prof_a.id, KEY, 0)
    realized_mirror.increment(db_session, "", KEY, 1)
    db_session.commit()
    assert realized_mirror.realized_counts(db_session, prof_a.id) == {}


def test_create_done_counts_and_scheduled_does_not(db_session, prof_a):
    done = make_appointment(
        db_session, professional=prof_a, d=MONDAY, status=AppointmentStatus.DONE
    )
    sched = make_appointment(db_session, professional=prof_a, d=MONDAY, hhmm="09:00")
    realized_mirror.on_create(db_session, done)
    realized_mirror.on_create(db_session, sched)
    db_session.commit()
    assert _counter(db_session, prof_a.id) == 1


def test_update_moves_the_unit_between_buckets(db_session, prof_a, prof_b):
    ap = make_appointment(
        db_session, professional=prof_a, d=MONDAY, status=AppointmentStatus.DONE
    )
    realized_mirror.on_create(db_session, ap)
    db_session.commit()

    # mesmo fato: nada muda
    before = realized_mirror.fact_of(ap)
    ap.room = 2
    realized_mirror.on_update(db_session, before, ap)
    db_session.commit()
    assert _counter(db_session, prof_a.id) == 1

    # troca de profissional e de mês de uma vez
    before = realized_mirror.fact_of(ap)
    ap.professional_id = prof_b.id
    ap.date = date(2030, 4, 2)
    realized_mirror.on_update(db_session, before, ap)
    db_session.commit()
    assert _counter(db_session, prof_a.id) == 0
    assert _counter(db_session, prof_b.id, "2030-04") == 1

    # realizado -> cancelado
    before = realized_mirror.fact_of(ap)
    ap.status = AppointmentStatus.CANCELLED
    realized_mirror.on_update(db_session, before, ap)
    db_session.commit()
    assert _counter(db_session, prof_b.id, "2030-04") == 0


def test_delete_done_decrements(db_session, prof_a):
    ap = make_appointment(
        db_session, professional=prof_a, d=MONDAY, status=AppointmentStatus.DONE
    )
    realized_mirror.on_create(db_session, ap)
    realized_mirror.on_delete(db_session, ap)
    db_session.commit()
    assert _counter(db_session, prof_a.id) == 0


def test_resync_overwrites_drift_and_is_idempotent(db_session, prof_a, prof_b):
    make_appointment(
        db_session, professional=prof_a, d=MONDAY, status=AppointmentStatus.DONE
    )
    make_appointment(
        db_session,
        professional=prof_a,
        d=MONDAY,
        hhmm="09:00",
        status=AppointmentStatus.DONE,
    )
    # outro mês não entra
    make_appointment(
        db_session,
        professional=prof_a,
        d=date(2030, 2, 28),
        status=AppointmentStatus.DONE,
    )
    realized_mirror.set_absolute(db_session, prof_a.id, KEY, 7)
    realized_mirror.set_absolute(db_session, prof_b.id, KEY, -2)
    db_session.commit()

    first = realized_mirror.resync_month(db_session, KEY, [prof_a.id, prof_b.id])
    db_session.commit()
    second = realized_mirror.resync_month(db_session, KEY, [prof_a.id, prof_b.id])
    db_session.commit()

    assert first == second == {prof_a.id: 2, prof_b.id: 0}
    assert _counter(db_session, prof_a.id) == 2
    assert _counter(db_session, prof_b.id) == 0


def test_count_realized_uses_real_month_end(db_session, prof_a):
    make_appointment(
        db_session,
        professional=prof_a,
        d=date(2030, 2, 28),
        status=AppointmentStatus.DONE,
    )
    assert realized_mirror.count_realized(db_session, "2030-02")[prof_a.id] == 1
    assert realized_mirror.count_realized(db_session, "2030-03")[prof_a.id] == 0
