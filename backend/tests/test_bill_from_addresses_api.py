import json
import logging


def test_create_and_list(client, auth_headers, bill_from):
    assert bill_from["companyName"] == "Alice Consulting"
    response = client.get("/api/bill-from-addresses", headers=auth_headers)
    assert response.status_code == 200
    assert [a["id"] for a in response.json()["billFromAddresses"]] == [bill_from["id"]]


def test_all_fields_required(client, auth_headers):
    response = client.post(
        "/api/bill-from-addresses", json={"companyName": "Half"}, headers=auth_headers
    )
    assert response.status_code == 400
    assert len(response.json()["details"]) == 6


def test_addresses_are_private(client, other_auth_headers, bill_from):
    assert client.get("/api/bill-from-addresses", headers=other_auth_headers).json() == {
        "billFromAddresses": []
    }
    response = client.get(f"/api/bill-from-addresses/{bill_from['id']}", headers=other_auth_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "Bill from address not found"

    response = client.delete(f"/api/bill-from-addresses/{bill_from['id']}", headers=other_auth_headers)
    assert response.status_code == 404


def test_update(client, auth_headers, bill_from):
    payload = {
        "companyName": "Alice GmbH",
        "address": "2 Main St",
        "city": "Hamburg",
        "postalCode": "20095",
        "country": "DE",
        "email": "hello@alice.test",
        "phone": "+49 40 1234",
    }
    response = client.put(
        f"/api/bill-from-addresses/{bill_from['id']}", json=payload, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["billFromAddress"]["city"] == "Hamburg"


def test_delete_blocked_while_used(client, auth_headers, acme, bill_from, invoice_payload):
    created = client.post(
        "/api/invoices",
        json=invoice_payload(acme["id"], billFromId=bill_from["id"]),
        headers=auth_headers,
    )
    assert created.status_code == 201

    response = client.delete(f"/api/bill-from-addresses/{bill_from['id']}", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "Cannot delete address"


def test_delete(client, auth_headers, bill_from):
    response = client.delete(f"/api/bill-from-addresses/{bill_from['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(
        f"/api/bill-from-addresses/{bill_from['id']}", headers=auth_headers
    ).status_code == 404


def test_id_beyond_integer_range_is_404(client, auth_headers):
    for method in ("get", "delete"):
        response = getattr(client, method)(f"/api/bill-from-addresses/{2**63}", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Bill from address not found"


def audit_events(caplog):
    return [json.loads(record.getMessage())["event_type"] for record in caplog.records if record.name == "audit"]


def test_create_and_update_are_audited(client, auth_headers, caplog):
    caplog.set_level(logging.INFO, logger="audit")
    payload = {
        "companyName": "Audited Ltd",
        "address": "3 Main St",
        "city": "Berlin",
        "postalCode": "10115",
        "country": "DE",
        "email": "audit@example.com",
        "phone": "+49 30 7654321",
    }
    address = client.post("/api/bill-from-addresses", json=payload, headers=auth_headers).json()
    address_id = address["billFromAddress"]["id"]
    client.put(
        f"/api/bill-from-addresses/{address_id}",
        json={**payload, "city": "Munich"},
        headers=auth_headers,
    )

    events = audit_events(caplog)
    assert "bill_from_address.create" in events
    assert "bill_from_address.update" in events
