"""Integration tests for ``POST /api/v1/users/register``."""

from __future__ import annotations

from pathlib import Path

from tests.factories.user import UserFactory
from tests.helpers.utils import image_file, registration_form

URL = "/api/v1/users/register"


def _post(client, **overrides):
    return client.post(URL, data=registration_form(**overrides), content_type="multipart/form-data")


def test_register_creates_user(client, uploader) -> None:
    resp = _post(client, coverImage=image_file("cover.jpg"))

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["statusCode"] == 201
    assert body["success"] is True
    assert body["message"] == "User registered successfully"

    user = body["data"]
    assert set(user) == {
        "id",
        "username",
        "email",
        "fullName",
        "avatar",
        "coverImage",
        "createdAt",
        "updatedAt",
    }
    assert user["username"] == "ada"
    assert user["avatar"].endswith(".png")
    assert user["coverImage"].endswith(".jpg")
    assert len(uploader.uploaded) == 2


def test_register_without_cover_image(client, uploader) -> None:
    resp = _post(client)

    assert resp.status_code == 201
    assert resp.get_json()["data"]["coverImage"] == ""


def test_register_leaves_no_staged_files(app, client, uploader) -> None:
    _post(client, coverImage=image_file("cover.jpg"))

    assert list(Path(app.config["UPLOAD_TEMP_DIR"]).iterdir()) == []


def test_register_requires_avatar(client, uploader) -> None:
    resp = _post(client, avatar=None)

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "Avatar file is required"
    assert body["success"] is False
    assert body["data"] is None
    assert uploader.uploaded == []


def test_register_missing_field(client, uploader) -> None:
    resp = _post(client, password=None)

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["message"] == "All fields are required"
    assert "password" in body["details"]["errors"]


def test_register_rejects_non_image_upload(app, client, uploader) -> None:
    resp = _post(client, avatar=image_file("avatar.svgz"))

    assert resp.status_code == 400
    body = resp.get_json()
    assert "avatar" in body["message"]
    assert body["details"]["allowed"]
    assert list(Path(app.config["UPLOAD_TEMP_DIR"]).iterdir()) == []


def test_register_duplicate_username(client, session, uploader) -> None:
    UserFactory(username="ada", email="someone@example.com")
    session.commit()

    resp = _post(client)

    assert resp.status_code == 409
    assert resp.get_json()["message"] == "User already exists"
    assert uploader.uploaded == []
