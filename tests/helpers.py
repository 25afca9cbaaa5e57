from backend.app.core.security import create_access_token


def auth_headers(user_id: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def invoice_payload(invoice_id: str = "inv-1", **overrides) -> dict:
    payload = {
        "id": invoice_id,
        "invoiceNumber": "INV-001",
        "date": "2026-10-01",
        "dueDate": "2026-10-31",
        "sender": {"name": "Studio North", "email": "billing@studionorth.test", "address": "1 Main St"},
        "client": {"name": "Acme Ltd", "email": "ap@acme.test", "address": "9 Side Rd"},
        "items": [
            {"id": "item-1", "description": "Design", "quantity": 2, "rate": 100},
            {"id": "item-2", "description": "Hosting", "quantity": 1, "rate": 50},
        ],
        "taxRate": 10,
        "currency": "USD",
    }
    payload.update(overrides)
    return payload
