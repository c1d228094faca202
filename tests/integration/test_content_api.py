import pytest
from fastapi import HTTPException

from wavy.config import settings
from wavy.models import Category
from wavy.routers.content import download_cv
from wavy.security.deps import AuthUser


def job_payload(**overrides) -> dict:
    payload = {"title": "Développeur Python", "slug": "dev-python", "status": "published", "location": "Paris"}
    payload.update(overrides)
    return payload


def test_jobs_crud(client, admin) -> None:
    _, headers = admin
    created = client.post("/api/jobs", json=job_payload(), headers=headers)
    assert created.status_code == 201
    job_id = created.json()["id"]
    client.post("/api/jobs", json=job_payload(slug="draft-job", status="draft"), headers=headers)

    published = client.get("/api/jobs", params={"status": "published"}).json()
    assert [j["slug"] for j in published] == ["dev-python"]

    updated = client.put(f"/api/jobs/{job_id}", json={"featured": True}, headers=headers)
    assert updated.json()["featured"] is True
    assert updated.json()["title"] == "Développeur Python"
    assert len(client.get("/api/jobs", params={"featured": "true"}).json()) == 1

    assert client.delete(f"/api/jobs/{job_id}", headers=headers).json() == {"success": True}
    assert client.delete(f"/api/jobs/{job_id}", headers=headers).status_code == 404


def test_job_writes_need_admin(client, consultant) -> None:
    _, headers = consultant
    assert client.post("/api/jobs", json=job_payload(), headers=headers).status_code == 403
    assert client.post("/api/jobs", json=job_payload()).status_code == 401


def test_duplicate_slug_is_conflict(client, admin) -> None:
    _, headers = admin
    client.post("/api/jobs", json=job_payload(), headers=headers)
    assert client.post("/api/jobs", json=job_payload(), headers=headers).status_code == 409


def test_trainings_with_category_and_publication_date(client, db, admin) -> None:
    _, headers = admin
    category = Category(name="Data", slug="data")
    db.add(category)
    db.commit()

    created = client.post(
        "/api/trainings",
        json={"title": "Pandas", "slug": "pandas", "category_id": str(category.id), "price": "1200.00"},
        headers=headers,
    ).json()
    assert created["category_name"] == "Data"
    assert created["published_at"] is None

    published = client.put(f"/api/trainings/{created['id']}", json={"status": "published"}, headers=headers).json()
    assert published["published_at"] is not None

    listed = client.get("/api/trainings", params={"slug": "pandas"}).json()
    assert listed[0]["category_name"] == "Data"
    assert client.get("/api/trainings/categories").json()[0]["name"] == "Data"


def test_training_listing_filters_on_status(client, admin) -> None:
    _, headers = admin
    client.post("/api/trainings", json={"title": "SQL", "slug": "sql", "status": "published"}, headers=headers)
    client.post("/api/trainings", json={"title": "Rust", "slug": "rust"}, headers=headers)

    published = client.get("/api/trainings", params={"status": "published"}).json()
    assert [t["slug"] for t in published] == ["sql"]
    drafts = client.get("/api/trainings", params={"status": "draft"}).json()
    assert [t["slug"] for t in drafts] == ["rust"]
    assert len(client.get("/api/trainings").json()) == 2

    missing = client.delete("/api/trainings/00000000-0000-0000-0000-000000000000", headers=headers)
    assert missing.status_code == 404


def test_public_forms_and_admin_views(client, admin) -> None:
    _, headers = admin
    job_id = client.post("/api/jobs", json=job_payload(), headers=headers).json()["id"]

    app = client.post(
        "/api/applications",
        json={"job_id": job_id, "name": "Paul", "email": "paul@example.com", "cv_url": "123-cv.pdf"},
    )
    assert app.status_code == 201
    assert "id" in app.json()
    assert client.post("/api/training-leads", json={"name": "Lea", "email": "lea@example.com"}).status_code == 201
    assert client.post(
        "/api/contact", json={"name": "Zoe", "email": "zoe@example.com", "message": "Bonjour"}
    ).status_code == 201

    assert client.get("/api/applications").status_code == 401
    applications = client.get("/api/applications", headers=headers).json()
    assert applications[0]["job_title"] == "Développeur Python"
    leads = client.get("/api/training-leads", headers=headers).json()
    assert leads[0]["training_title"] is None

    stats = client.get("/api/stats", headers=headers).json()
    assert stats == {"jobs": 1, "trainings": 0, "applications": 1, "training_leads": 1, "pending_cra": 0}


def test_application_requires_valid_email(client) -> None:
    assert client.post("/api/applications", json={"name": "X", "email": "nope"}).status_code == 400


def test_upload_and_download_cv(client, admin) -> None:
    _, headers = admin
    resp = client.post("/api/upload", files={"file": ("mon CV (final).pdf", b"%PDF-1.4 data", "application/pdf")})
    assert resp.status_code == 200
    stored = resp.json()["path"]
    assert stored.endswith("-mon_CV__final_.pdf")
    assert (settings.cv_upload_dir / stored).read_bytes() == b"%PDF-1.4 data"

    assert client.get(f"/api/uploads/cvs/{stored}").status_code == 401
    download = client.get(f"/api/uploads/cvs/{stored}", headers=headers)
    assert download.status_code == 200
    assert download.content == b"%PDF-1.4 data"
    assert client.get("/api/uploads/cvs/missing.pdf", headers=headers).status_code == 404


def test_upload_size_limit(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)
    resp = client.post("/api/upload", files={"file": ("big.pdf", b"x" * 11, "application/pdf")})
    assert resp.status_code == 413
    assert not any(settings.cv_upload_dir.glob("*-big.pdf"))


def test_download_rejects_path_traversal() -> None:
    admin_user = AuthUser(id="00000000-0000-0000-0000-000000000001", email="a@wavy.test", roles=["admin"])
    with pytest.raises(HTTPException) as exc:
        download_cv("../../wavy.db", admin=admin_user)
    assert exc.value.status_code == 400


def test_health(client) -> None:
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert "timestamp" in body
