"""Integration tests for image and project API routes."""

import pytest

ADMIN = {"x-admin-access": "true"}


def png(name: str = "photo.png", data: bytes = b"\x89PNG\r\n") -> tuple[str, tuple[str, bytes, str]]:
    return ("images", (name, data, "image/png"))


def upload(client, count: int = 1, **form):
    data = {"title": "Site photos"}
    data.update({k: str(v) for k, v in form.items()})
    return client.post(
        "/api/images",
        files=[png(f"p{i}.png") for i in range(count)],
        data=data,
    )


# --- Upload ---


def test_upload_single_public_image(client):
    resp = upload(client, category="built", project_id=3)

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "1 image(s) uploaded successfully"
    image = body["images"][0]
    assert image["category"] == "built"
    assert image["project_id"] == 3
    assert image["filepath"] == "/uploads/p0.png"
    assert "uploadDate" in image
    assert image["access_token"] is None


def test_category_omitted_defaults_to_unbuilt(client):
    resp = upload(client)

    image = resp.json()["images"][0]
    assert image["category"] == "unbuilt"
    assert image["access_token"] is None


def test_upload_requires_title(client):
    resp = client.post("/api/images", files=[png()], data={})

    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "validation_error"


def test_upload_without_files(client):
    resp = client.post("/api/images", data={"title": "Nothing"})

    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "validation_error"


def test_six_file_batch_rejected_whole(client):
    resp = upload(client, count=6, project_id=1)

    assert resp.status_code == 400
    assert client.get("/api/images", headers=ADMIN).json() == []


def test_transport_part_limit(client):
    resp = upload(client, count=11)

    assert resp.status_code == 400
    assert "Too many files" in resp.json()["detail"]["message"]


def test_unsupported_file_type(client):
    resp = client.post(
        "/api/images",
        files=[("images", ("run.exe", b"MZ", "application/x-msdownload"))],
        data={"title": "Bad"},
    )

    assert resp.status_code == 400
    assert "Unsupported file type" in resp.json()["detail"]["message"]


def test_every_failing_file_reported(client):
    resp = client.post(
        "/api/images",
        files=[
            ("images", ("a.exe", b"1", "application/x-msdownload")),
            ("images", ("b.exe", b"1", "application/x-msdownload")),
        ],
        data={"title": "Bad"},
    )

    errors = resp.json()["detail"]["errors"]
    assert [e["field"] for e in errors] == ["images[0]", "images[1]"]


def test_sixth_asset_into_full_project(client):
    assert upload(client, count=5, project_id=7).status_code == 201

    resp = upload(client, count=1, project_id=7)

    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "capacity_exceeded"


# --- Secret access lifecycle ---


def test_secret_token_rotation_end_to_end(client):
    created = upload(client, category="secret", project_id=7).json()["images"][0]
    image_id = created["id"]
    token = created["access_token"]
    assert len(token) == 64

    assert client.get(f"/api/images/{image_id}", params={"access_token": token}).status_code == 200
    assert client.get(f"/api/images/{image_id}").status_code == 403

    rotated = client.post(f"/api/images/{image_id}/regenerate-token")
    assert rotated.status_code == 200
    new_token = rotated.json()["access_token"]
    assert new_token != token

    assert client.get(f"/api/images/{image_id}", params={"access_token": token}).status_code == 403
    assert client.get(f"/api/images/{image_id}", params={"access_token": new_token}).status_code == 200
    assert (
        client.get(f"/api/images/{image_id}/data", params={"access_token": new_token}).status_code
        == 200
    )


def test_token_holder_sees_metadata_without_token(client):
    created = upload(client, category="secret", project_id=2).json()["images"][0]

    resp = client.get(f"/api/images/{created['id']}", params={"access_token": created["access_token"]})

    assert "access_token" not in resp.json()


def test_admin_sees_token(client):
    created = upload(client, category="secret", project_id=2).json()["images"][0]

    resp = client.get(f"/api/images/{created['id']}", headers=ADMIN)

    assert resp.json()["access_token"] == created["access_token"]


def test_public_image_hides_token_key_from_non_admin(client):
    image_id = upload(client, category="built").json()["images"][0]["id"]

    assert "access_token" not in client.get(f"/api/images/{image_id}").json()
    assert "access_token" in client.get(f"/api/images/{image_id}", headers=ADMIN).json()


def test_denied_body_shape(client):
    image_id = upload(client, category="secret").json()["images"][0]["id"]

    resp = client.get(f"/api/images/{image_id}/data", params={"access_token": "wrong"})

    assert resp.status_code == 403
    assert resp.json()["detail"]["kind"] == "access_denied"


def test_revoked_image_listed_for_admin_without_content(client):
    created = upload(client, category="secret", project_id=4).json()["images"][0]
    image_id = created["id"]

    resp = client.post(f"/api/images/{image_id}/revoke-access")
    assert resp.json() == {"message": "Access revoked successfully"}

    listed = client.get("/api/images", headers=ADMIN).json()
    assert [i["id"] for i in listed] == [image_id]
    assert listed[0]["access_token"] is None

    assert client.get(f"/api/images/{image_id}/data", headers=ADMIN).status_code == 403
    old = client.get(f"/api/images/{image_id}/data", params={"access_token": created["access_token"]})
    assert old.status_code == 403


def test_revoke_public_image(client):
    image_id = upload(client, category="built").json()["images"][0]["id"]

    resp = client.post(f"/api/images/{image_id}/revoke-access")

    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "invalid_category"


def test_rotate_public_image(client):
    image_id = upload(client, category="unbuilt").json()["images"][0]["id"]

    resp = client.post(f"/api/images/{image_id}/regenerate-token")

    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "not_secret"


# --- Reads ---


def test_data_returns_bytes_and_content_type(client):
    image_id = upload(client).json()["images"][0]["id"]

    resp = client.get(f"/api/images/{image_id}/data")

    assert resp.status_code == 200
    assert resp.content == b"\x89PNG\r\n"
    assert resp.headers["content-type"].startswith("image/png")


def test_missing_image(client):
    resp = client.get("/api/images/999")

    assert resp.status_code == 404
    assert resp.json()["detail"]["kind"] == "not_found"


def test_list_filters_secret_rows(client):
    upload(client, category="secret", project_id=1)
    public = upload(client, category="built", project_id=1).json()["images"][0]

    anon = client.get("/api/images").json()
    admin = client.get("/api/images", headers=ADMIN).json()

    assert [i["id"] for i in anon] == [public["id"]]
    assert len(admin) == 2


def test_list_with_token_shows_matching_secret_rows(client):
    secret = upload(client, category="secret", project_id=1).json()["images"][0]

    listed = client.get("/api/images", params={"access_token": secret["access_token"]}).json()

    assert [i["id"] for i in listed] == [secret["id"]]
    assert "access_token" not in listed[0]


def test_list_by_category_and_project(client):
    upload(client, category="built", project_id=1)
    target = upload(client, category="unbuilt", project_id=2).json()["images"][0]

    listed = client.get("/api/images", params={"category": "unbuilt", "project_id": "2"}).json()

    assert [i["id"] for i in listed] == [target["id"]]


def test_list_bad_project_id(client):
    resp = client.get("/api/images", params={"project_id": "abc"})

    assert resp.status_code == 400


# --- Update / replace / delete ---


def test_update_to_secret_issues_token(client):
    image_id = upload(client, category="built").json()["images"][0]["id"]

    resp = client.put(f"/api/images/{image_id}", json={"title": "Now secret", "category": "secret"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Image updated successfully"
    assert len(body["image"]["access_token"]) == 64


def test_update_from_secret_clears_token(client):
    image_id = upload(client, category="secret").json()["images"][0]["id"]

    resp = client.put(f"/api/images/{image_id}", json={"title": "Open", "category": "built"})

    assert resp.json()["image"]["access_token"] is None
    assert client.get(f"/api/images/{image_id}").status_code == 200


def test_update_move_into_full_project(client):
    upload(client, count=5, project_id=1)
    image_id = upload(client, project_id=2).json()["images"][0]["id"]

    resp = client.put(f"/api/images/{image_id}", json={"title": "Move", "project_id": 1})

    assert resp.status_code == 400
    assert resp.json()["detail"]["kind"] == "capacity_exceeded"


def test_update_missing_image(client):
    resp = client.put("/api/images/42", json={"title": "Ghost"})

    assert resp.status_code == 404


def test_replace_file(client):
    created = upload(client, category="secret").json()["images"][0]
    image_id = created["id"]

    resp = client.put(
        f"/api/images/{image_id}/file",
        files={"image": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
    )

    assert resp.json() == {"message": "Image file updated successfully", "image_id": image_id}
    data = client.get(f"/api/images/{image_id}/data", params={"access_token": created["access_token"]})
    assert data.content == b"%PDF-1.4"
    assert data.headers["content-type"].startswith("application/pdf")


def test_replace_file_requires_file(client):
    image_id = upload(client).json()["images"][0]["id"]

    resp = client.put(f"/api/images/{image_id}/file")

    assert resp.status_code == 400


def test_delete_is_terminal(client):
    image_id = upload(client, project_id=5).json()["images"][0]["id"]

    assert client.delete(f"/api/images/{image_id}").json() == {"message": "Image deleted successfully"}

    assert client.get(f"/api/images/{image_id}").status_code == 404
    assert client.get(f"/api/images/{image_id}/data").status_code == 404
    assert client.get("/api/images", headers=ADMIN).json() == []
    assert client.delete(f"/api/images/{image_id}").status_code == 404


# --- Projects ---


def test_project_view(client):
    upload(client, count=2, category="built", project_id=8)

    resp = client.get("/api/projects/8")

    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Project 8"
    assert body["totalImages"] == 2
    assert len(body["images"]) == 2


def test_secret_project_needs_token(client):
    token = upload(client, category="secret", project_id=8).json()["images"][0]["access_token"]

    assert client.get("/api/projects/8").status_code == 404
    assert client.get("/api/projects/8", params={"access_token": token}).json()["totalImages"] == 1


# --- Store failures ---


@pytest.fixture
def locked_db(settings):
    import sqlite3

    conn = sqlite3.connect(settings.db_path, isolation_level=None)
    conn.execute("BEGIN IMMEDIATE")
    yield
    conn.execute("ROLLBACK")
    conn.close()


def test_store_unavailable_returns_503(client, rules, locked_db, monkeypatch):
    monkeypatch.setattr(rules.store, "timeout_seconds", 0.05)
    from src.api.deps import get_rules
    from src.api.main import app

    app.dependency_overrides[get_rules] = lambda: rules

    resp = client.get("/api/images")

    assert resp.status_code == 503
    assert resp.headers["retry-after"] == "1"
    assert resp.json()["detail"]["kind"] == "store_unavailable"


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "service": "api"}


# --- Part size guard ---


@pytest.fixture
def small_parts(rules, monkeypatch):
    from src.api.deps import get_rules
    from src.api.main import app

    monkeypatch.setattr(rules.uploads, "max_upload_bytes", 16)
    app.dependency_overrides[get_rules] = lambda: rules
    return rules


def test_oversized_part_rejected(client, small_parts):
    resp = client.post(
        "/api/images",
        files=[png("big.png", b"x" * 64)],
        data={"title": "Too big"},
    )

    assert resp.status_code == 400
    assert "exceeding the 16 byte limit" in resp.json()["detail"]["message"]
    assert client.get("/api/images", headers=ADMIN).json() == []


def test_oversized_replacement_rejected(client, small_parts):
    image_id = upload(client).json()["images"][0]["id"]

    resp = client.put(
        f"/api/images/{image_id}/file",
        files={"image": ("big.pdf", b"x" * 64, "application/pdf")},
    )

    assert resp.status_code == 400
    assert client.get(f"/api/images/{image_id}/data").content == b"\x89PNG\r\n"


def test_oversized_part_never_read():
    import io

    from fastapi import HTTPException, UploadFile

    from src.api.routes.images import _to_uploaded

    class UnreadableBody(io.BytesIO):
        def read(self, *args):
            raise AssertionError("part body was buffered")

    part = UploadFile(file=UnreadableBody(), size=1024, filename="big.png")

    with pytest.raises(HTTPException) as exc:
        _to_uploaded(part, 16, "images[0]")

    assert exc.value.status_code == 400
    assert exc.value.detail["message"].startswith('File "big.png" is 1024 bytes')
