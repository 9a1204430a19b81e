# SPDX-License-Identifier: Apache-2.0
"""Catalog service: file deletion ordering against the blob store."""
import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import StorageError
from app.models import DatasetFile
from app.services.catalog_service import delete_file


@pytest.fixture
def stored_file(session, seed, blob_store):
    path = f"datasets/{seed.dataset.id}/abc-cat.png"
    url = blob_store.upload(path, b"cat")
    record = DatasetFile(dataset_id=seed.dataset.id, file_name="cat.png", file_path=path, file_url=url, file_size=3)
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def test_delete_file_removes_record_then_blob(session, seed, blob_store, stored_file):
    path = stored_file.file_path
    delete_file(session, blob_store, seed.dataset.id, stored_file.id)
    assert session.get(DatasetFile, stored_file.id) is None
    assert not (blob_store.root / path).exists()


def test_blob_kept_when_record_delete_fails(session, seed, blob_store, stored_file, monkeypatch):
    path, file_id = stored_file.file_path, stored_file.id

    def locked_commit():
        raise OperationalError("DELETE dataset_files", {}, Exception("database is locked"))

    monkeypatch.setattr(session, "commit", locked_commit)
    with pytest.raises(StorageError):
        delete_file(session, blob_store, seed.dataset.id, file_id)
    monkeypatch.undo()

    assert (blob_store.root / path).read_bytes() == b"cat"
    session.expire_all()
    assert session.get(DatasetFile, file_id) is not None
