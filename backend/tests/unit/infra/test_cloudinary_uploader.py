"""Unit tests for the HTTP image uploader, with the image host mocked by ``responses``."""

from __future__ import annotations

import hashlib

import pytest
import requests
import responses

from accounts.infra.uploads.cloudinary_uploader import CloudinaryImageUploader
from tests.helpers.utils import PNG_BYTES

UPLOAD_URL = "https://api.cloudinary.com/v1_1/demo/auto/upload"


@pytest.fixture()
def uploader() -> CloudinaryImageUploader:
    return CloudinaryImageUploader(cloud_name="demo", api_key="key-1", api_secret="shh")


@pytest.fixture()
def staged(tmp_path):
    path = tmp_path / "avatar.png"
    path.write_bytes(PNG_BYTES)
    return path


def test_sign_matches_sorted_params_plus_secret(uploader) -> None:
    expected = hashlib.sha1(b"public_id=x&timestamp=100shh").hexdigest()
    assert uploader.sign({"timestamp": "100", "public_id": "x"}) == expected


@responses.activate
def test_upload_success_returns_secure_url_and_removes_file(uploader, staged) -> None:
    responses.add(
        responses.POST,
        UPLOAD_URL,
        json={"secure_url": "https://res.cloudinary.com/demo/a.png", "public_id": "a"},
        status=200,
    )

    result = uploader.upload(staged)

    assert result is not None
    assert result.url == "https://res.cloudinary.com/demo/a.png"
    assert result.public_id == "a"
    assert not staged.exists()
    body = responses.calls[0].request.body
    assert b'name="api_key"' in body
    assert b'name="signature"' in body


@responses.activate
def test_upload_failure_returns_none_and_still_removes_file(uploader, staged) -> None:
    responses.add(responses.POST, UPLOAD_URL, json={"error": {"message": "bad"}}, status=400)

    assert uploader.upload(staged) is None
    assert not staged.exists()


@responses.activate
def test_network_error_returns_none(uploader, staged) -> None:
    responses.add(responses.POST, UPLOAD_URL, body=requests.ConnectionError("unreachable"))

    assert uploader.upload(staged) is None
    assert not staged.exists()


@responses.activate
def test_response_without_url_returns_none(uploader, staged) -> None:
    responses.add(responses.POST, UPLOAD_URL, json={"public_id": "a"}, status=200)
    assert uploader.upload(staged) is None


def test_missing_path_returns_none_without_network(uploader) -> None:
    assert uploader.upload(None) is None
    assert uploader.upload("") is None


def test_missing_file_returns_none(uploader, tmp_path) -> None:
    assert uploader.upload(tmp_path / "gone.png") is None
