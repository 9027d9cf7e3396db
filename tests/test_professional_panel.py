from datetime import date, datetime
from zoneinfo import ZoneInfo

from clinica.models.appointment import AppointmentStatus, PaymentMethod
from clinica.services.panel import month_counters
from conftest import make_appointment

BR_TZ = ZoneInfo("America/Sao_Paulo")


def test_month_counters(db_session, prof_a, prof_b):
    rows = [
        make_appointment(
            db_session, professional=prof_a, d=date(2030, 3, 4), status=AppointmentStatus.DONE
        ),
        make_appointment(
            db_session,
            professional=prof_a,
            d=date(2030, 3, 20),
            hhmm="14:00",
            status=AppointmentStatus.SCHEDULED,
        ),
        # já passou
        make_appointment(
            db_session,
            professional=prof_a,
            d=date(2030, 3, 10),
            status=AppointmentStatus.SCHEDULED,
        ),
        # outro profissional
        make_appointment(
            db_session,
            professional=prof_b,
            d=date(2030, 3, 20),
            hhmm="15:00",
            status=AppointmentStatus.SCHEDULED,
        ),
        # outro mês
        make_appointment(
            db_session,
            professional=prof_a,
            d=date(2030, 4, 1),
            status=AppointmentStatus.SCHEDULED,
        ),
    ]
    now = datetime(2030, 3, 15, 9, 0, tzinfo=BR_TZ)
    c = month_counters(rows, prof_a.id, date(2030, 3, 1), now=now)
    assert (c.month, c.realized, c.scheduled_ahead) == ("2030-03", 1, 1)


def test_my_grid_colors(client, pro_headers, prof_a, prof_b, client_x, client_y, db_session):
    make_appointment(
        db_session,
        professional=prof_a,
        client=client_x,
        d=date(2030, 3, 4),
        status=AppointmentStatus.DONE,
    )
    make_appointment(
        db_session, professional=prof_a, client=client_y, d=date(2030, 3, 4), hhmm="09:00"
    )
    make_appointment(
        db_session, professional=prof_b, d=date(2030, 3, 4), room=2
    )

    r = client.get(
        "/api/v1/me/agenda/grid",
        params={"anchor": "2030-03-06", "client_id": client_x.id},
        headers=pro_headers,
    )
    assert r.status_code == 200
    g = r.json()
    assert g["days"][0] == "2030-03-04"
    rows = {(x["day"], x["time"]): x["cells"] for x in g["rows"]}

    mine, other = rows[("2030-03-04", "08:00")][0], rows[("2030-03-04", "08:00")][1]
    assert (mine["visible"], mine["color"]) == (True, "#b7f7cc")
    assert mine["appointment"]["client_id"] == client_x.id
    assert (other["visible"], other["color"]) == (False, "#6b7280")
    assert other["appointment"] is None

    # meu, mas de outro cliente com filtro ativo: branco
    filtered = rows[("2030-03-04", "09:00")][0]
    assert (filtered["visible"], filtered["color"]) == (False, "#ffffff")

    # totais só com os meus realizados
    assert g["window_total"] == 1


def test_my_counters_and_finance(client, pro_headers, prof_a, client_x, client_y, db_session):
    make_appointment(
        db_session,
        professional=prof_a,
        client=client_x,
        d=date(2030, 3, 4),
        status=AppointmentStatus.DONE,
        payment_method=PaymentMethod.PIX,
        received_value=100.0,
        transfer_value=60.0,
    )
    make_appointment(
        db_session,
        professional=prof_a,
        client=client_y,
        d=date(2030, 3, 5),
        status=AppointmentStatus.CANCELLED,
        received_value=30.0,
    )

    r = client.get(
        "/api/v1/me/agenda/counters", params={"anchor": "2030-03-20"}, headers=pro_headers
    )
    assert r.status_code == 200
    assert r.json()["realized"] == 1
    assert r.json()["month"] == "2030-03"

    r = client.get("/api/v1/me/finance", params={"month": "2030-03"}, headers=pro_headers)
    data = r.json()
    assert data["total_received"] == 130.0
    assert data["clinic_result"] == 70.0
    assert [g["name"] for g in data["clients"]] == ["Xavier Costa", "Yara Melo"]
    assert all(g["pending"] for g in data["clients"])


def test_my_clients(client, pro_headers, prof_a, client_x, client_y, db_session):
    client_x.professional_id = prof_a.id
    prof_a.associated_clients.append(client_y)
    db_session.commit()

    r = client.get("/api/v1/me/clients", headers=pro_headers)
    assert [c["name"] for c in r.json()] == ["Xavier Costa", "Yara Melo"]
