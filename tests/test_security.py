from datetime import timedelta

import pytest
from fastapi import status

from clinica.core.security import create_access_token, create_token, decode_token


def test_create_and_decode_access_token():
    token = create_access_token("42")
    payload = decode_token(token, expected_type="access")
    assert payload["sub"] == "42"
    assert payload["type"] == "access"
    assert payload["exp"] > payload["iat"]


def test_decode_rejects_wrong_type_and_expired():
    refresh = create_token("42", "refresh", timedelta(minutes=5))
    with pytest.raises(ValueError):
        decode_token(refresh, expected_type="access")

    expired = create_token("42", "access", timedelta(seconds=-10))
    with pytest.raises(ValueError):
        decode_token(expired, expected_type="access")

    with pytest.raises(ValueError):
        decode_token("not-a-jwt", expected_type="access")


def test_admin_routes_require_token(client):
    r = client.get("/api/v1/admin/agenda")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED

    r = client.get(
        "/api/v1/admin/agenda", headers={"Authorization": "Bearer garbage"}
    )
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_professional_cannot_use_admin_routes(client, pro_headers):
    r = client.get("/api/v1/admin/agenda", headers=pro_headers)
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_admin_without_professional_record_cannot_use_panel(client, admin_headers):
    r = client.get("/api/v1/me/agenda/counters?anchor=2030-03-04", headers=admin_headers)
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_request_id_is_echoed(client):
    r = client.get("/healthz", headers={"X-Request-ID": "abc-123"})
    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "abc-123"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
