"""
Integration Tests: API Endpoints

Tests for the upload, listing, view, download and delete routes, the static
image mount, and the error response format.
"""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from app import create_app
from config.settings import Settings, StorageSettings

FROZEN_PREFIX = "1700000000000-"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(64))


async def upload(client: AsyncClient, name: str, content: bytes, content_type: str):
    return await client.post("/upload", files={"file": (name, content, content_type)})


# =============================================================================
# Status Endpoint Tests
# =============================================================================

class TestStatusEndpoints:
    """Test liveness, health and metrics."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "File Services API is running"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == "1.0.0"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_metrics_counts_operations(self, client: AsyncClient):
        await upload(client, "notes.txt", b"x", "text/plain")

        response = await client.get("/metrics")

        assert response.status_code == 200
        assert 'file_operations_total{operation="upload",status="success"}' in response.text

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cors_headers(self, client: AsyncClient):
        response = await client.get("/files", headers={"Origin": "http://example.com"})
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_cors_headers_on_errors(self, client: AsyncClient):
        response = await client.get("/download/missing.txt", headers={"Origin": "http://example.com"})

        assert response.status_code == 404
        assert response.headers["access-control-allow-origin"] == "*"


# =============================================================================
# Upload Endpoint Tests
# =============================================================================

class TestUpload:
    """Test POST /upload."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_image(self, client: AsyncClient, images_dir: Path):
        response = await upload(client, "photo.png", PNG_BYTES, "image/png")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "File uploaded successfully"
        assert data["filename"] == FROZEN_PREFIX + "photo.png"
        assert data["isImage"] is True
        assert data["url"] == "/public/images/" + FROZEN_PREFIX + "photo.png"
        assert Path(data["path"]) == images_dir / data["filename"]
        assert (images_dir / data["filename"]).read_bytes() == PNG_BYTES

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_generic(self, client: AsyncClient, uploads_dir: Path):
        response = await upload(client, "notes.txt", b"hello", "text/plain")

        assert response.status_code == 200
        data = response.json()
        assert data["isImage"] is False
        assert data["url"] == "/download/" + FROZEN_PREFIX + "notes.txt"
        assert (uploads_dir / data["filename"]).read_bytes() == b"hello"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_url_is_quoted(self, client: AsyncClient):
        response = await upload(client, "my notes.txt", b"x", "text/plain")

        data = response.json()
        assert data["filename"] == FROZEN_PREFIX + "my notes.txt"
        assert data["url"] == "/download/" + FROZEN_PREFIX + "my%20notes.txt"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_strips_directories(self, client: AsyncClient, uploads_dir: Path):
        response = await upload(client, "../../escape.txt", b"x", "text/plain")

        assert response.status_code == 200
        assert response.json()["filename"] == FROZEN_PREFIX + "escape.txt"
        assert (uploads_dir / (FROZEN_PREFIX + "escape.txt")).exists()

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_without_body(self, client: AsyncClient):
        response = await client.post("/upload")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No file uploaded"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_wrong_field(self, client: AsyncClient):
        response = await client.post(
            "/upload", files={"attachment": ("notes.txt", b"x", "text/plain")}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == 400

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_file_field_as_text(self, client: AsyncClient, uploads_dir: Path, images_dir: Path):
        """A plain form value under 'file' is not a file."""
        response = await client.post("/upload", data={"file": "not-a-file"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No file uploaded"
        assert not uploads_dir.exists()
        assert list(images_dir.iterdir()) == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_part_without_filename(self, client: AsyncClient, uploads_dir: Path, images_dir: Path):
        response = await client.post("/upload", files={"file": ("", b"x", "text/plain")})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No file uploaded"
        assert not uploads_dir.exists()
        assert list(images_dir.iterdir()) == []

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_upload_too_large(self, temp_dir: Path, storage):
        settings = Settings(
            environment="test",
            storage=StorageSettings(
                uploads_dir=temp_dir / "uploads",
                images_dir=temp_dir / "public" / "images",
                max_upload_size_mb=1,
            ),
        )
        app = create_app(settings=settings, storage=storage)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await upload(client, "big.bin", b"\0" * (1024 * 1024 + 1), "application/octet-stream")
            listing = await client.get("/files")

        assert response.status_code == 413
        assert response.json()["error"]["code"] == 413
        assert listing.json()["uploads"] == []


# =============================================================================
# Listing Endpoint Tests
# =============================================================================

class TestListing:
    """Test GET /files and GET /images."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_empty_stores(self, client: AsyncClient):
        response = await client.get("/files")

        assert response.status_code == 200
        assert response.json() == {"uploads": [], "images": []}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_both_stores(self, client: AsyncClient):
        await upload(client, "photo.png", PNG_BYTES, "image/png")
        await upload(client, "b.txt", b"b", "text/plain")
        await upload(client, "a.txt", b"a", "text/plain")

        data = (await client.get("/files")).json()

        assert data["uploads"] == [FROZEN_PREFIX + "a.txt", FROZEN_PREFIX + "b.txt"]
        assert data["images"] == [FROZEN_PREFIX + "photo.png"]

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_list_images_only(self, client: AsyncClient):
        await upload(client, "photo.png", PNG_BYTES, "image/png")
        await upload(client, "notes.txt", b"x", "text/plain")

        response = await client.get("/images")

        assert response.status_code == 200
        assert response.json() == {"images": [FROZEN_PREFIX + "photo.png"]}


# =============================================================================
# Retrieval Endpoint Tests
# =============================================================================

class TestRetrieval:
    """Test inline views, downloads and the static mount."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_view_image_inline(self, client: AsyncClient):
        filename = (await upload(client, "photo.png", PNG_BYTES, "image/png")).json()["filename"]

        response = await client.get(f"/images/{filename}")

        assert response.status_code == 200
        assert response.content == PNG_BYTES
        assert response.headers["content-type"] == "image/png"
        assert "attachment" not in response.headers.get("content-disposition", "")

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_static_mount(self, client: AsyncClient):
        url = (await upload(client, "photo.png", PNG_BYTES, "image/png")).json()["url"]

        response = await client.get(url)

        assert response.status_code == 200
        assert response.content == PNG_BYTES

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_download_attachment(self, client: AsyncClient):
        payload = bytes(range(256)) * 16
        filename = (await upload(client, "data.bin", payload, "application/octet-stream")).json()["filename"]

        response = await client.get(f"/download/{filename}")

        assert response.status_code == 200
        assert response.content == payload
        assert response.headers["content-disposition"] == f'attachment; filename="{filename}"'

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_generic_file_not_viewable(self, client: AsyncClient):
        filename = (await upload(client, "notes.txt", b"x", "text/plain")).json()["filename"]

        response = await client.get(f"/images/{filename}")

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Image not found"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_image_not_downloadable(self, client: AsyncClient):
        filename = (await upload(client, "photo.png", PNG_BYTES, "image/png")).json()["filename"]

        response = await client.get(f"/download/{filename}")

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "File not found"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_traversal_name_rejected(self, client: AsyncClient):
        response = await client.get("/download/..%5Csecret.txt")

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid path"


# =============================================================================
# Delete Endpoint Tests
# =============================================================================

class TestDelete:
    """Test DELETE /files/{filename}."""

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_generic(self, client: AsyncClient):
        filename = (await upload(client, "notes.txt", b"x", "text/plain")).json()["filename"]

        response = await client.delete(f"/files/{filename}")

        assert response.status_code == 200
        assert response.json() == {"message": "File deleted successfully"}
        assert (await client.get(f"/download/{filename}")).status_code == 404

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_image(self, client: AsyncClient):
        filename = (await upload(client, "photo.png", PNG_BYTES, "image/png")).json()["filename"]

        response = await client.delete(f"/files/{filename}")

        assert response.status_code == 200
        assert response.json() == {"message": "Image deleted successfully"}
        assert (await client.get("/images")).json() == {"images": []}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_prefers_generic_copy(self, client: AsyncClient):
        """Same stored name in both stores: the generic copy goes first."""
        await upload(client, "shared.png", b"generic", "application/octet-stream")
        await upload(client, "shared.png", PNG_BYTES, "image/png")
        filename = FROZEN_PREFIX + "shared.png"

        first = await client.delete(f"/files/{filename}")
        assert first.json() == {"message": "File deleted successfully"}
        assert (await client.get(f"/images/{filename}")).status_code == 200

        second = await client.delete(f"/files/{filename}")
        assert second.json() == {"message": "Image deleted successfully"}

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_missing(self, client: AsyncClient):
        response = await client.delete("/files/nope.txt")

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == 404
        assert error["message"] == "File not found"
        assert error["type"] == "FileNotFoundInStoreError"

    @pytest.mark.integration
    @pytest.mark.asyncio
    async def test_delete_twice(self, client: AsyncClient):
        filename = (await upload(client, "notes.txt", b"x", "text/plain")).json()["filename"]

        assert (await client.delete(f"/files/{filename}")).status_code == 200
        assert (await client.delete(f"/files/{filename}")).status_code == 404
