import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from backend.app.crud.crud_invoice_template import clean_template_data
from backend.app.db.base import Base
from backend.app.db.session import engine
from backend.app.main import app
from helpers import auth_headers, invoice_payload


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_template(client: TestClient, user_id: str, name: str, **extra) -> dict:
    resp = client.post(
        "/invoice-templates/",
        json={"name": name, **extra},
        headers=auth_headers(user_id),
    )
    assert resp.status_code in (200, 201)
    return resp.json()


def test_clean_template_data_strips_document_fields():
    cleaned = clean_template_data(invoice_payload("inv-9", status="Paid"))
    assert "id" not in cleaned
    assert "invoiceNumber" not in cleaned
    assert "date" not in cleaned
    assert "dueDate" not in cleaned
    assert cleaned["client"] == {"name": "", "email": "", "address": "", "phone": ""}
    assert cleaned["status"] == "Draft"
    assert cleaned["sender"]["name"] == "Studio North"
    assert cleaned["taxRate"] == 10


def test_create_template():
    client = TestClient(app)
    data = create_template(
        client, "owner", "Consulting", description="Hourly work", template_data=invoice_payload("inv-1"),
    )
    assert data["name"] == "Consulting"
    assert data["description"] == "Hourly work"
    assert data["usage_count"] == 0
    assert "invoiceNumber" not in data["template_data"]
    assert data["template_data"]["client"]["name"] == ""


def test_list_templates_owner_isolated():
    client = TestClient(app)
    create_template(client, "user-a", "A1")
    create_template(client, "user-a", "A2")
    create_template(client, "user-b", "B1")

    resp_a = client.get("/invoice-templates/", headers=auth_headers("user-a"))
    resp_b = client.get("/invoice-templates/", headers=auth_headers("user-b"))
    assert len(resp_a.json()) == 2
    assert len(resp_b.json()) == 1


def test_get_foreign_template_is_not_found():
    client = TestClient(app)
    template_id = create_template(client, "user-a", "Private")["id"]
    resp = client.get(f"/invoice-templates/{template_id}", headers=auth_headers("user-b"))
    assert resp.status_code == 404


def test_update_template():
    client = TestClient(app)
    template_id = create_template(client, "owner", "Old")["id"]

    resp = client.put(
        f"/invoice-templates/{template_id}",
        json={"name": "New", "template_data": {"currency": "EUR", "dueDate": "2030-01-01"}},
        headers=auth_headers("owner"),
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "New"
    assert data["template_data"]["currency"] == "EUR"
    assert "dueDate" not in data["template_data"]


def test_use_template_increments_usage():
    client = TestClient(app)
    template_id = create_template(client, "owner", "Popular")["id"]
    for _ in range(3):
        resp = client.post(f"/invoice-templates/{template_id}/use", headers=auth_headers("owner"))
        assert resp.status_code == 200
    assert resp.json()["usage_count"] == 3


def test_delete_template():
    client = TestClient(app)
    template_id = create_template(client, "owner", "ToDelete")["id"]

    del_resp = client.delete(f"/invoice-templates/{template_id}", headers=auth_headers("owner"))
    assert del_resp.status_code == 200
    assert del_resp.json()["name"] == "ToDelete"
    list_resp = client.get("/invoice-templates/", headers=auth_headers("owner"))
    assert list_resp.json() == []


def broken_commit(self):
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


def test_create_template_store_failure_is_retryable(monkeypatch):
    monkeypatch.setattr("sqlalchemy.orm.Session.commit", broken_commit)
    client = TestClient(app)
    resp = client.post("/invoice-templates/", json={"name": "Monthly"}, headers=auth_headers("owner"))
    assert resp.status_code == 503
    error = resp.json()["error"]
    assert error["code"] == "UPSTREAM_ERROR"
    assert error["retryable"] is True
    assert "locked" not in error["message"]


def test_use_template_store_failure_is_retryable(monkeypatch):
    client = TestClient(app)
    template_id = create_template(client, "owner", "Popular")["id"]
    monkeypatch.setattr("sqlalchemy.orm.Session.commit", broken_commit)
    resp = client.post(f"/invoice-templates/{template_id}/use", headers=auth_headers("owner"))
    assert resp.status_code == 503
    assert resp.json()["error"]["retryable"] is True
