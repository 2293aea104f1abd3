def test_create_and_fetch_client(client, auth_headers, acme):
    assert acme["name"] == "Acme"
    assert acme["email"] == "billing@acme.test"
    assert acme["postalCode"] is None

    response = client.get(f"/api/clients/{acme['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["client"]["city"] == "Berlin"


def test_name_is_required(client, auth_headers):
    response = client.post("/api/clients", json={"name": "   "}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_blank_email_is_accepted_as_missing(client, auth_headers):
    response = client.post("/api/clients", json={"name": "Initech", "email": ""}, headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["client"]["email"] is None


def test_list_newest_first(client, auth_headers, acme):
    client.post("/api/clients", json={"name": "Initech"}, headers=auth_headers)
    response = client.get("/api/clients", headers=auth_headers)
    names = [c["name"] for c in response.json()["clients"]]
    assert names == ["Initech", "Acme"]


def test_clients_are_shared_between_users(client, other_auth_headers, acme):
    response = client.get(f"/api/clients/{acme['id']}", headers=other_auth_headers)
    assert response.status_code == 200


def test_update_replaces_all_fields(client, auth_headers, acme):
    response = client.put(
        f"/api/clients/{acme['id']}",
        json={"name": "Acme Corp", "country": "DE"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    updated = response.json()["client"]
    assert updated["name"] == "Acme Corp"
    assert updated["country"] == "DE"
    assert updated["email"] is None
    assert updated["city"] is None


def test_missing_client_is_404(client, auth_headers):
    for method in ("get", "delete"):
        response = getattr(client, method)("/api/clients/9999", headers=auth_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Client not found"


def test_delete_client(client, auth_headers, acme):
    response = client.delete(f"/api/clients/{acme['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert client.get(f"/api/clients/{acme['id']}", headers=auth_headers).status_code == 404


def test_delete_blocked_while_invoiced(client, auth_headers, acme, invoice_payload):
    created = client.post("/api/invoices", json=invoice_payload(acme["id"]), headers=auth_headers)
    assert created.status_code == 201

    response = client.delete(f"/api/clients/{acme['id']}", headers=auth_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "Cannot delete client"
    assert client.get(f"/api/clients/{acme['id']}", headers=auth_headers).status_code == 200


def test_client_invoices(client, auth_headers, acme, invoice_payload):
    client.post("/api/invoices", json=invoice_payload(acme["id"]), headers=auth_headers)
    response = client.get(f"/api/clients/{acme['id']}/invoices", headers=auth_headers)
    assert response.status_code == 200
    invoices = response.json()["invoices"]
    assert len(invoices) == 1
    assert invoices[0]["client"]["name"] == "Acme"
    assert len(invoices[0]["items"]) == 2


def test_requires_token(client):
    assert client.get("/api/clients").status_code == 401


def test_id_beyond_integer_range_is_404(client, auth_headers):
    huge = 2**63
    for method, path in [
        ("get", f"/api/clients/{huge}"),
        ("delete", f"/api/clients/{huge}"),
        ("get", f"/api/clients/{huge}/invoices"),
    ]:
        response = getattr(client, method)(path, headers=auth_headers)
        assert response.status_code == 404, path
        assert response.json()["error"] == "Client not found"

    response = client.put(f"/api/clients/{huge}", json={"name": "Nobody"}, headers=auth_headers)
    assert response.status_code == 404
