from datetime import date

import pytest
from fastapi import status

from clinica.core.errors import InvalidInput
from clinica.models.appointment import AppointmentStatus, PaymentMethod
from clinica.services import finance
from conftest import make_appointment


@pytest.fixture
def march(db_session, prof_a, prof_b, client_x, client_y):
    """Mês com um de cada status, dois profissionais e um fora do mês."""
    make_appointment(
        db_session,
        professional=prof_a,
        client=client_x,
        d=date(2030, 3, 4),
        status=AppointmentStatus.DONE,
        payment_method=PaymentMethod.PIX,
        received_value=150.0,
        transfer_value=90.0,
    )
    make_appointment(
        db_session,
        professional=prof_a,
        client=client_y,
        d=date(2030, 3, 5),
        status=AppointmentStatus.CANCELLED,
        payment_method=PaymentMethod.CASH,
        received_value=50.0,
        transfer_value=0.0,
    )
    make_appointment(
        db_session,
        professional=prof_b,
        client=client_x,
        d=date(2030, 3, 6),
        status=AppointmentStatus.CHANGED,
        payment_method=PaymentMethod.CARD,
        received_value=100.0,
        transfer_value=60.0,
    )
    # agendado não entra no fechamento
    make_appointment(
        db_session,
        professional=prof_b,
        d=date(2030, 3, 7),
        status=AppointmentStatus.SCHEDULED,
        received_value=999.0,
    )
    # outro mês
    make_appointment(
        db_session,
        professional=prof_a,
        d=date(2030, 4, 1),
        status=AppointmentStatus.DONE,
        received_value=999.0,
    )


def test_month_summary_totals(db_session, march, prof_a, prof_b):
    s = finance.month_summary(db_session, "2030-03")
    assert len(s.rows) == 3
    assert s.total_received == 300.0
    assert s.total_transfer == 150.0
    assert s.clinic_result == 150.0
    assert s.by_payment == {"pix": 150.0, "dinheiro": 50.0, "cartao": 100.0}

    a = s.by_professional[prof_a.id]
    assert (a.name, a.total, a.transfer, a.clinic) == ("Ana Souza", 200.0, 90.0, 110.0)
    b = s.by_professional[prof_b.id]
    assert (b.total, b.transfer, b.clinic) == (100.0, 60.0, 40.0)


def test_group_by_client_for_professional(db_session, march, prof_a):
    s = finance.month_summary(db_session, "2030-03", professional_id=prof_a.id)
    groups = finance.group_by_client(s.rows)
    assert [g.name for g in groups] == ["Xavier Costa", "Yara Melo"]
    assert groups[0].received == 150.0
    assert groups[0].clinic == 60.0
    assert [g.pending for g in groups] == [True, True]

    groups[0].rows[0].finance_posted = True
    assert [g.pending for g in finance.group_by_client(s.rows)] == [False, True]


def test_post_finance_rejects_negative(db_session, actor):
    with pytest.raises(InvalidInput):
        finance.post_finance(db_session, "x", -1.0, 0.0, actor)


def test_finance_endpoints(client, admin_headers, march, prof_a, db_session):
    r = client.get("/api/v1/admin/finance", params={"month": "2030-03"}, headers=admin_headers)
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["total_received"] == 300.0
    assert data["clinic_result"] == 150.0
    assert [p["name"] for p in data["by_professional"]] == ["Ana Souza", "Bruno Lima"]

    r = client.get("/api/v1/admin/finance", params={"month": "2030-3"}, headers=admin_headers)
    assert r.status_code == 422

    ap_id = next(a["id"] for a in data["appointments"] if a["status"] == "alterado")
    r = client.put(
        f"/api/v1/admin/finance/appointments/{ap_id}",
        json={"received_value": 120.0, "transfer_value": 70.0},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["finance_posted"] is True
    assert r.json()["received_value"] == 120.0

    r = client.put(
        "/api/v1/admin/finance/appointments/missing",
        json={"received_value": 1.0},
        headers=admin_headers,
    )
    assert r.status_code == 404
