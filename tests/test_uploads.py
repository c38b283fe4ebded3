"""
Unit tests for file uploads.
"""
from pathlib import Path

from roombook.config import get_settings
from roombook.routers.uploads import stored_filename


class TestUpload:

    def test_upload_and_fetch(self, client):
        response = client.post(
            "/api/upload",
            files={"file": ("Room Photo.JPG", b"fake-jpeg-bytes", "image/jpeg")},
        )
        assert response.status_code == 200
        url = response.json()["url"]
        assert url.startswith("/uploads/")
        assert url.endswith(".jpg")

        stored = Path(get_settings().upload_dir) / url.rsplit("/", 1)[1]
        assert stored.read_bytes() == b"fake-jpeg-bytes"

        fetched = client.get(url)
        assert fetched.status_code == 200
        assert fetched.content == b"fake-jpeg-bytes"

    def test_upload_without_file(self, client):
        response = client.post("/api/upload")
        assert response.status_code == 400
        assert response.json()["error"] == "No file uploaded"


class TestStoredFilename:

    def test_keeps_extension_only(self):
        name = stored_filename("../../etc/passwd.mp4")
        assert name.endswith(".mp4")
        assert "/" not in name
        assert "passwd" not in name

    def test_names_are_unique(self):
        assert stored_filename("a.png") != stored_filename("a.png")
