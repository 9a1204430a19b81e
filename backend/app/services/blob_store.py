# SPDX-License-Identifier: Apache-2.0
"""Local-filesystem blob store for dataset files."""
from __future__ import annotations

from pathlib import Path

from fastapi import Request

from app.core.exceptions import StorageError, ValidationError


def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)


class LocalBlobStore:
    """Stores blobs under `root` and serves them from `base_url`.

    Keys are relative POSIX paths such as ``datasets/3/1700000000-cat.png``;
    a key that would resolve outside `root` is rejected.
    """

    def __init__(self, root: Path | str, base_url: str = "/files"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        try:
            target.relative_to(self.root.resolve())
        except ValueError:
            raise ValidationError("Invalid blob path")
        return target

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        target = self._resolve(path)
        if target.exists():
            raise StorageError(f"Blob already exists: {path}")
        try:
            ensure_dir(target.parent)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Could not store {path}") from exc
        return self.url_for(path)

    def remove(self, path: str) -> None:
        target = self._resolve(path)
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Could not remove {path}") from exc


def get_blob_store(request: Request) -> LocalBlobStore:
    """The app's blob store (for FastAPI Depends)."""
    return request.app.state.blob_store
