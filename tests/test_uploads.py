"""Tests for image upload validation and storage."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from PIL import Image

from cashcrash.core.exceptions import BadRequestError
from cashcrash.services.uploads import upload_dir, validate_image


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


SVG = b'<svg xmlns="http://www.w3.org/2000/svg" width="4" height="4"></svg>'


class TestValidateImage:
    def test_png_accepted(self):
        assert validate_image("logo.PNG", "image/png", _png_bytes()) == ".png"

    def test_svg_accepted_without_decoding(self):
        assert validate_image("logo.svg", "image/svg+xml", SVG) == ".svg"

    def test_text_file_rejected(self):
        with pytest.raises(BadRequestError) as exc_info:
            validate_image("notes.txt", "text/plain", b"hello")
        assert exc_info.value.error_code == "INVALID_IMAGE"

    def test_renamed_file_rejected(self):
        """Extension and content type alone are not enough for raster images."""
        with pytest.raises(BadRequestError):
            validate_image("logo.png", "image/png", b"definitely not a png")

    def test_format_mismatch_rejected(self):
        with pytest.raises(BadRequestError):
            validate_image("logo.jpg", "image/jpeg", _png_bytes())

    def test_empty_file_rejected(self):
        with pytest.raises(BadRequestError):
            validate_image("logo.png", "image/png", b"")


class TestUploadEndpoints:
    def test_company_logo_upload(self, admin_client: TestClient):
        response = admin_client.post(
            "/companies",
            data={"name": "Acme", "symbol": "ACME", "price": "10"},
            files={"logo": ("acme.png", _png_bytes(), "image/png")},
        )

        assert response.status_code == status.HTTP_201_CREATED
        logo_url = response.json()["logoUrl"]
        assert logo_url.startswith("/uploads/")
        assert logo_url.endswith(".png")
        assert (upload_dir() / Path(logo_url).name).exists()

    def test_uploaded_logo_wins_over_url(self, admin_client: TestClient):
        response = admin_client.post(
            "/currencies",
            data={"name": "Frank", "code": "CHF", "rate": "39", "logoUrl": "https://example.com/x.png"},
            files={"logo": ("chf.svg", SVG, "image/svg+xml")},
        )
        assert response.json()["logoUrl"].startswith("/uploads/")

    def test_team_profile_picture(self, admin_client: TestClient):
        response = admin_client.put(
            "/teams/1",
            files={"profilePic": ("me.png", _png_bytes(), "image/png")},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["profilePicUrl"].startswith("/uploads/")

    def test_non_image_rejected(self, admin_client: TestClient):
        response = admin_client.post(
            "/companies",
            data={"name": "Acme", "symbol": "ACME", "price": "10"},
            files={"logo": ("acme.txt", b"hello", "text/plain")},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "INVALID_IMAGE"
        assert admin_client.get("/companies").json()[-1]["symbol"] != "ACME"
