def create_client(client, headers, name="Acme") -> str:
    resp = client.post("/api/clients", json={"name": name, "contact_email": "it@acme.test"}, headers=headers)
    assert resp.status_code == 201
    return resp.json()["id"]


def test_consultant_only_sees_assigned_clients(client, admin, consultant) -> None:
    _, admin_headers = admin
    user, headers = consultant
    acme = create_client(client, admin_headers, "Acme")
    create_client(client, admin_headers, "Globex")

    resp = client.post(
        "/api/clients/assignments",
        json={"user_id": str(user.id), "client_id": acme, "mission_name": "Migration"},
        headers=admin_headers,
    )
    assert resp.status_code == 201

    assert [c["name"] for c in client.get("/api/clients", headers=admin_headers).json()] == ["Acme", "Globex"]
    assert [c["name"] for c in client.get("/api/clients", headers=headers).json()] == ["Acme"]


def test_duplicate_assignment_is_ignored(client, admin, consultant) -> None:
    _, admin_headers = admin
    user, _ = consultant
    acme = create_client(client, admin_headers)
    body = {"user_id": str(user.id), "client_id": acme}
    client.post("/api/clients/assignments", json=body, headers=admin_headers)
    again = client.post("/api/clients/assignments", json=body, headers=admin_headers)
    assert again.json() == {"success": True}
    assert len(client.get("/api/clients/assignments", headers=admin_headers).json()) == 1


def test_assignments_are_scoped_for_consultants(client, admin, consultant, other_consultant) -> None:
    _, admin_headers = admin
    user, headers = consultant
    other, _ = other_consultant
    acme = create_client(client, admin_headers)
    validator = client.post(
        f"/api/clients/{acme}/validators", json={"name": "Bob", "email": "bob@acme.test"}, headers=admin_headers
    ).json()

    for owner in (user, other):
        client.post(
            "/api/clients/assignments",
            json={"user_id": str(owner.id), "client_id": acme, "default_validator_id": validator["id"]},
            headers=admin_headers,
        )

    mine = client.get("/api/clients/assignments", params={"userId": str(other.id)}, headers=headers).json()
    assert [a["user_id"] for a in mine] == [str(user.id)]
    assert mine[0]["client_name"] == "Acme"
    assert mine[0]["validator_email"] == "bob@acme.test"

    theirs = client.get("/api/clients/assignments", params={"userId": str(other.id)}, headers=admin_headers).json()
    assert [a["user_id"] for a in theirs] == [str(other.id)]


def test_client_admin_operations(client, admin, consultant) -> None:
    _, admin_headers = admin
    _, headers = consultant
    acme = create_client(client, admin_headers)

    assert client.post("/api/clients", json={"name": "Nope"}, headers=headers).status_code == 403
    updated = client.put(f"/api/clients/{acme}", json={"name": "Acme Corp"}, headers=admin_headers)
    assert updated.json()["name"] == "Acme Corp"

    validator = client.post(
        f"/api/clients/{acme}/validators", json={"name": "Bob", "email": "bob@acme.test"}, headers=admin_headers
    ).json()
    assert len(client.get(f"/api/clients/{acme}/validators", headers=admin_headers).json()) == 1
    client.delete(f"/api/clients/validators/{validator['id']}", headers=admin_headers)
    assert client.get(f"/api/clients/{acme}/validators", headers=admin_headers).json() == []

    assert client.delete(f"/api/clients/{acme}", headers=admin_headers).json() == {"success": True}
    assert client.put(f"/api/clients/{acme}", json={"name": "Ghost"}, headers=admin_headers).status_code == 404
