from sqlalchemy.exc import OperationalError

from clinica.models.professional import ProfessionalPublic
from clinica.services import public_stats, realized_mirror
from clinica.utils.tz import clinic_tz
from clinica.utils.week import current_month_key
from conftest import make_professional


def test_stats_reads_only_active_mirror_rows(client, db_session, prof_a, prof_b):
    key = current_month_key(clinic_tz())
    make_professional(db_session, "Zuleica Inativa", is_active=False)
    realized_mirror.increment(db_session, prof_a.id, key, 3)
    realized_mirror.increment(db_session, prof_b.id, "1999-01", 5)
    db_session.commit()

    # sem token: rota pública
    r = client.get("/api/v1/public/stats")
    assert r.status_code == 200
    data = r.json()
    assert data["month"] == key
    assert [p["name"] for p in data["professionals"]] == ["Ana Souza", "Bruno Lima"]
    assert [p["realized_this_month"] for p in data["professionals"]] == [3, 0]
    assert data["total_realized"] == 3


def test_negative_drift_is_shown_as_zero(db_session, prof_a):
    realized_mirror.set_absolute(db_session, prof_a.id, "2030-03", -1)
    db_session.commit()
    cards, total = public_stats.month_cards(db_session, "2030-03")
    assert [c.realized for c in cards] == [0]
    assert total == 0


def test_read_failure_falls_back_to_empty(db_session, monkeypatch):
    def boom(*args, **kwargs):
        raise OperationalError("select", {}, Exception("offline"))

    monkeypatch.setattr(db_session, "execute", boom)
    assert public_stats.month_cards(db_session, "2030-03") == ([], 0)


def test_mirror_row_has_no_client_data(db_session, prof_a):
    pub = db_session.get(ProfessionalPublic, prof_a.id)
    cols = set(ProfessionalPublic.__table__.columns.keys())
    assert pub is not None
    assert not any("client" in c for c in cols)
