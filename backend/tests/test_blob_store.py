# SPDX-License-Identifier: Apache-2.0
"""Local blob store."""
import pytest

from app.core.exceptions import StorageError, ValidationError
from app.services.blob_store import LocalBlobStore


def test_upload_and_remove(tmp_path):
    store = LocalBlobStore(tmp_path, "/files/")
    url = store.upload("datasets/1/a.txt", b"hello", "text/plain")
    assert url == "/files/datasets/1/a.txt"
    assert (tmp_path / "datasets/1/a.txt").read_bytes() == b"hello"
    store.remove("datasets/1/a.txt")
    assert not (tmp_path / "datasets/1/a.txt").exists()
    store.remove("datasets/1/a.txt")


def test_upload_refuses_overwrite(tmp_path):
    store = LocalBlobStore(tmp_path)
    store.upload("a.txt", b"1")
    with pytest.raises(StorageError):
        store.upload("a.txt", b"2")


def test_paths_outside_root_rejected(tmp_path):
    store = LocalBlobStore(tmp_path / "root")
    with pytest.raises(ValidationError):
        store.upload("../escape.txt", b"x")
    with pytest.raises(ValidationError):
        store.remove("../../etc/passwd")
