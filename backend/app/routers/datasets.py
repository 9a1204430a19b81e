# SPDX-License-Identifier: Apache-2.0
"""Dataset list, detail, create, update, delete, files, admin answer view."""
from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session

from app.config import settings
from app.core.exceptions import ValidationError
from app.core.identity import get_current_user, require_admin
from app.database import get_session
from app.models import User
from app.schemas import DatasetCreate, DatasetUpdate
from app.services import catalog_service
from app.services.aggregation_service import list_submissions_with_answers
from app.services.blob_store import LocalBlobStore, get_blob_store
from app.services.catalog_service import IncomingFile, dataset_to_dict, file_to_dict

router = APIRouter(tags=["datasets"])


@router.get("")
def datasets_list(user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    """All datasets for admins; published ones only for users."""
    return {"datasets": catalog_service.list_datasets(session, user)}


@router.get("/{dataset_id}")
def datasets_detail(dataset_id: int, user: User = Depends(get_current_user), session: Session = Depends(get_session)):
    return {"dataset": catalog_service.dataset_detail(session, user, dataset_id)}


@router.post("", status_code=201)
def datasets_create(body: DatasetCreate, admin: User = Depends(require_admin), session: Session = Depends(get_session)):
    dataset = catalog_service.create_dataset(
        session,
        admin,
        name=body.name,
        file_type=body.file_type,
        description=body.description,
        is_published=body.is_published,
        questions=[q.model_dump(mode="json") for q in body.questions],
    )
    return {"message": "Dataset created", "dataset": dataset_to_dict(dataset)}


@router.put("/{dataset_id}")
def datasets_update(
    dataset_id: int,
    body: DatasetUpdate,
    admin: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    dataset = catalog_service.update_dataset(session, dataset_id, changes)
    return {"message": "Dataset updated", "dataset": dataset_to_dict(dataset)}


@router.delete("/{dataset_id}")
def datasets_delete(
    dataset_id: int,
    admin: User = Depends(require_admin),
    session: Session = Depends(get_session),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    catalog_service.delete_dataset(session, blob_store, dataset_id)
    return {"message": "Dataset deleted"}


@router.post("/{dataset_id}/files")
async def datasets_upload_files(
    dataset_id: int,
    files: list[UploadFile] = File(default=[]),
    admin: User = Depends(require_admin),
    session: Session = Depends(get_session),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    """Multipart upload of up to `max_files_per_upload` files; per-file failures are reported."""
    if not files:
        raise ValidationError("No files uploaded")
    if len(files) > settings.max_files_per_upload:
        raise ValidationError(f"At most {settings.max_files_per_upload} files per upload")
    uploads = [
        IncomingFile(
            filename=f.filename or "unnamed",
            content_type=f.content_type or "application/octet-stream",
            data=await f.read(),
        )
        for f in files
    ]
    stored, errors = catalog_service.add_files(session, blob_store, dataset_id, uploads)
    out = {
        "message": f"Uploaded {len(stored)}/{len(uploads)} files",
        "files": [file_to_dict(f) for f in stored],
    }
    if errors:
        out["errors"] = errors
    return out


@router.delete("/{dataset_id}/files/{file_id}")
def datasets_delete_file(
    dataset_id: int,
    file_id: int,
    admin: User = Depends(require_admin),
    session: Session = Depends(get_session),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    catalog_service.delete_file(session, blob_store, dataset_id, file_id)
    return {"message": "File deleted"}


@router.get("/{dataset_id}/answers")
def datasets_answers(dataset_id: int, admin: User = Depends(require_admin), session: Session = Depends(get_session)):
    """Submissions of the dataset with their answers."""
    return list_submissions_with_answers(session, dataset_id)
