"""Tests for upload persistence and temp-file handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from imagelab.inference.results import ImagePayload
from imagelab.storage import uploads
from imagelab.storage.uploads import UploadStorage, content_type_for, temporary_upload


@pytest.mark.asyncio
async def test_save_returns_public_path(tmp_path: Path) -> None:
    storage = UploadStorage(tmp_path / "uploads")

    public_url = await storage.save(ImagePayload(data=b"\x89PNG"))

    filename = public_url.removeprefix("/uploads/")
    assert public_url.startswith("/uploads/") and filename.endswith(".png")
    assert (tmp_path / "uploads" / filename).read_bytes() == b"\x89PNG"
    assert storage.resolve(filename) == (tmp_path / "uploads" / filename).resolve()


def test_resolve_rejects_missing_and_traversal(tmp_path: Path) -> None:
    storage = UploadStorage(tmp_path / "uploads")
    storage.ensure_root()
    (tmp_path / "secret.txt").write_text("nope")

    assert storage.resolve("missing.png") is None
    assert storage.resolve("../secret.txt") is None


def test_content_type_by_extension() -> None:
    assert content_type_for("a.png") == "image/png"
    assert content_type_for("a.webp") == "image/jpeg"


@pytest.mark.asyncio
async def test_temporary_upload_removed_on_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(uploads.tempfile, "gettempdir", lambda: str(tmp_path))

    with pytest.raises(RuntimeError):
        async with temporary_upload(b"data", "../photo.webp") as path:
            assert path.parent == tmp_path
            assert path.name.endswith("-photo.webp")
            assert path.read_bytes() == b"data"
            raise RuntimeError("model failed")

    assert list(tmp_path.iterdir()) == []
