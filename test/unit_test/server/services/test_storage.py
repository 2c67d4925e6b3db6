"""Unit tests for local media storage."""

from io import BytesIO
from unittest.mock import patch

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from edustack.core.errors import BadRequestError
from edustack.server.services.storage import MediaStorage, safe_filename


def upload(name, content: bytes, content_type: str) -> UploadFile:
    return UploadFile(file=BytesIO(content), filename=name, headers=Headers({"content-type": content_type}))


@pytest.mark.parametrize(
    "name,expected",
    [
        ("photo.png", "photo.png"),
        ("my holiday photo.png", "my_holiday_photo.png"),
        ("../../etc/passwd", "passwd"),
        ("...", "file"),
        (None, "file"),
        ("été.jpg", "t_.jpg"),
    ],
)
def test_safe_filename(name, expected):
    assert safe_filename(name) == expected


class TestMediaStorage:
    @pytest.fixture
    def storage(self, tmp_path) -> MediaStorage:
        return MediaStorage(str(tmp_path), "http://cdn.test/media/", max_bytes=16)

    @pytest.mark.asyncio
    async def test_save(self, storage, tmp_path):
        stored = await storage.save(upload("clip one.mp4", b"0123456789", "video/mp4"), "videos")

        assert stored.filename == "clip one.mp4"
        assert stored.size == 10
        assert stored.mimetype == "video/mp4"
        assert stored.url.startswith("http://cdn.test/media/videos/")
        stored_name = stored.url.rsplit("/", 1)[1]
        assert stored_name.endswith("-clip_one.mp4")
        assert (tmp_path / "videos" / stored_name).read_bytes() == b"0123456789"

    @pytest.mark.asyncio
    async def test_same_name_in_the_same_millisecond(self, storage, tmp_path):
        with patch("edustack.server.services.storage.epoch_millis", return_value=1700000000000):
            first = await storage.save(upload("photo.png", b"first", "image/png"), "images")
            second = await storage.save(upload("photo.png", b"second", "image/png"), "images")

        assert first.url != second.url
        first_name = first.url.rsplit("/", 1)[1]
        second_name = second.url.rsplit("/", 1)[1]
        assert first_name.startswith("1700000000000-")
        assert (tmp_path / "images" / first_name).read_bytes() == b"first"
        assert (tmp_path / "images" / second_name).read_bytes() == b"second"

    @pytest.mark.asyncio
    async def test_limit_is_inclusive(self, storage):
        stored = await storage.save(upload("a.png", b"x" * 16, "image/png"), "images")
        assert stored.size == 16

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "file,message",
        [
            (None, "No file uploaded"),
            (upload("", b"x", "image/png"), "No file uploaded"),
            (upload("empty.png", b"", "image/png"), "No file uploaded"),
            (upload("doc.pdf", b"%PDF", "application/pdf"), "Only image and video files are allowed"),
            (upload("big.png", b"x" * 17, "image/png"), "File too large (limit 16 bytes)"),
        ],
    )
    async def test_rejected_uploads(self, storage, tmp_path, file, message):
        with pytest.raises(BadRequestError) as exc_info:
            await storage.save(file, "images")

        assert exc_info.value.message == message
        assert not (tmp_path / "images").exists()
