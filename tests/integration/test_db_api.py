import uuid

from wavy.models import CraReport
from tests.conftest import headers_for, make_user


def test_unknown_table_is_forbidden(client, admin) -> None:
    _, headers = admin
    resp = client.get("/api/db/users", headers=headers)
    assert resp.status_code == 403
    assert resp.json() == {"error": "Table non autorisée"}
    assert client.get("/api/db/otp_codes", headers=headers).status_code == 403


def test_generic_endpoint_requires_authentication(client) -> None:
    assert client.get("/api/db/jobs").status_code == 401


def test_insert_select_update_delete(client, admin) -> None:
    _, headers = admin
    rows = client.post(
        "/api/db/jobs",
        json=[
            {"title": "Data engineer", "slug": "data", "status": "published"},
            {"title": "DevOps", "slug": "devops", "status": "draft", "featured": True},
        ],
        headers=headers,
    )
    assert rows.status_code == 201
    assert [r["slug"] for r in rows.json()] == ["data", "devops"]

    single = client.post("/api/db/jobs", json={"title": "QA", "slug": "qa"}, headers=headers).json()
    assert single["status"] == "draft"

    published = client.get("/api/db/jobs", params={"status": "eq.published"}, headers=headers).json()
    assert [r["slug"] for r in published] == ["data"]

    ordered = client.get(
        "/api/db/jobs", params={"order": "slug:desc", "limit": "2", "select": "slug,title"}, headers=headers
    ).json()
    assert ordered == [{"slug": "qa", "title": "QA"}, {"slug": "devops", "title": "DevOps"}]

    subset = client.get("/api/db/jobs", params={"slug": "in.(qa,data)", "order": "slug:asc"}, headers=headers).json()
    assert [r["slug"] for r in subset] == ["data", "qa"]

    patched = client.patch("/api/db/jobs", params={"slug": "eq.qa"}, json={"featured": True}, headers=headers)
    assert patched.json()["featured"] is True

    nothing = client.patch("/api/db/jobs", params={"slug": "eq.ghost"}, json={"featured": True}, headers=headers)
    assert nothing.json() is None

    assert client.delete("/api/db/jobs", params={"slug": "eq.qa"}, headers=headers).json() == {"success": True}
    assert len(client.get("/api/db/jobs", headers=headers).json()) == 2


def test_mutations_without_filters_are_rejected(client, admin) -> None:
    _, headers = admin
    client.post("/api/db/jobs", json={"title": "Keep", "slug": "keep"}, headers=headers)

    assert client.delete("/api/db/jobs", headers=headers).status_code == 400
    assert client.patch("/api/db/jobs", json={"title": "All"}, headers=headers).status_code == 400
    assert len(client.get("/api/db/jobs", headers=headers).json()) == 1


def test_bad_filters_are_400(client, admin) -> None:
    _, headers = admin
    assert client.get("/api/db/jobs", params={"nope": "eq.1"}, headers=headers).status_code == 400
    assert client.get("/api/db/jobs", params={"order": "title"}, headers=headers).status_code == 400
    assert client.get("/api/db/jobs", params={"limit": "-3"}, headers=headers).status_code == 400
    assert client.post("/api/db/jobs", json={"title": "X", "slug": "x", "hack": 1}, headers=headers).status_code == 400


def test_unsupported_method_is_405(client, admin) -> None:
    _, headers = admin
    assert client.put("/api/db/jobs", json={}, headers=headers).status_code == 405


def test_role_gating(client, consultant) -> None:
    _, headers = consultant
    assert client.get("/api/db/jobs", headers=headers).status_code == 200
    resp = client.post("/api/db/jobs", json={"title": "X", "slug": "x"}, headers=headers)
    assert resp.status_code == 403
    assert resp.json() == {"error": "Accès refusé"}
    assert client.get("/api/db/client_validators", headers=headers).status_code == 403


def test_cra_rows_are_scoped_to_their_owner(client, admin, consultant, other_consultant) -> None:
    _, admin_headers = admin
    user, headers = consultant
    other, _ = other_consultant

    mine = client.post(
        "/api/db/cra_reports", json={"month": "2024-05", "user_id": str(user.id)}, headers=admin_headers
    ).json()
    client.post("/api/db/cra_reports", json={"month": "2024-05", "user_id": str(other.id)}, headers=admin_headers)

    assert [r["user_id"] for r in client.get("/api/db/cra_reports", headers=headers).json()] == [str(user.id)]
    assert [r["id"] for r in client.get("/api/db/cra_reports", headers=headers).json()] == [mine["id"]]
    assert len(client.get("/api/db/cra_reports", headers=admin_headers).json()) == 2

    # Admins keep full write access
    patched = client.patch(
        "/api/db/cra_reports", params={"id": f"eq.{mine['id']}"}, json={"worked_days": 12.5}, headers=admin_headers
    )
    assert patched.json()["worked_days"] == 12.5


def test_consultants_cannot_write_cra_rows_generically(client, db, consultant) -> None:
    _, headers = consultant
    created = client.post("/api/cra", json={"month": "2024-03", "worked_days": 18}, headers=headers).json()
    assert client.put(f"/api/cra/{created['id']}/submit", headers=headers).status_code == 200

    forged = client.patch(
        "/api/db/cra_reports",
        params={"id": f"eq.{created['id']}"},
        json={"status": "approved", "client_validation_status": "approved", "worked_days": 31},
        headers=headers,
    )
    assert forged.status_code == 403

    db.expire_all()
    report = db.get(CraReport, uuid.UUID(created["id"]))
    assert (report.status, report.client_validation_status, report.worked_days) == ("submitted", "pending", 18)

    # A second report for the same month cannot slip past the uniqueness check
    dup = client.post("/api/db/cra_reports", json={"month": "2024-03"}, headers=headers)
    assert dup.status_code == 403
    assert client.delete("/api/db/cra_reports", params={"id": f"eq.{created['id']}"}, headers=headers).status_code == 403
    assert len(client.get("/api/cra", headers=headers).json()) == 1


def test_invitations_are_admin_only(client, db, admin) -> None:
    _, admin_headers = admin
    visitor = make_user(db, "visitor@wavy.test")
    headers = headers_for(visitor)

    minted = client.post(
        "/api/db/user_invitations",
        json={"email": "sock@wavy.test", "token": "mytok", "status": "pending", "expires_at": "2099-01-01T00:00:00"},
        headers=headers,
    )
    assert minted.status_code == 403
    assert client.get("/api/db/user_invitations", headers=headers).status_code == 403

    accepted = client.post("/api/users/invitations/accept", json={"token": "mytok", "password": "secret123"})
    assert accepted.status_code == 400
    assert client.get("/api/db/user_invitations", headers=admin_headers).json() == []


def test_day_details_are_not_shared_between_consultants(client, consultant, other_consultant) -> None:
    _, headers = consultant
    _, other_headers = other_consultant
    created = client.post("/api/cra", json={"month": "2024-03"}, headers=headers).json()
    client.post(
        f"/api/cra/{created['id']}/days",
        json=[{"date": "2024-03-01", "state": "worked"}],
        headers=headers,
    )

    params = {"cra_report_id": f"eq.{created['id']}"}
    assert client.get("/api/db/cra_day_details", params=params, headers=other_headers).status_code == 403
    assert client.delete("/api/db/cra_day_details", params=params, headers=other_headers).status_code == 403
    assert len(client.get(f"/api/cra/{created['id']}/days", headers=headers).json()) == 1


def test_profiles_self_policy(client, consultant, other_consultant) -> None:
    user, headers = consultant
    other, _ = other_consultant

    updated = client.patch(
        "/api/db/profiles", params={"id": f"eq.{user.id}"}, json={"full_name": "Claire C."}, headers=headers
    )
    assert updated.json()["full_name"] == "Claire C."

    blocked = client.patch(
        "/api/db/profiles", params={"id": f"eq.{other.id}"}, json={"full_name": "Pwned"}, headers=headers
    )
    assert blocked.json() is None
