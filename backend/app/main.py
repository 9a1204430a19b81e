# SPDX-License-Identifier: Apache-2.0
"""FastAPI app factory. Thin layer: security middleware + routers only."""
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from sqlalchemy.engine import Engine

from app.config import settings
from app.core.logging_setup import configure_logging
from app.core.security import add_security_middleware
from app.database import build_engine, create_db_and_tables
from app.routers import answers, auth, datasets, questions, system
from app.services.blob_store import LocalBlobStore, ensure_dir


def create_app(engine: Engine | None = None, blob_store: LocalBlobStore | None = None) -> FastAPI:
    """Build the app around an explicit engine and blob store (defaults come from settings)."""
    configure_logging(settings.log_level)
    app = FastAPI(title="LabelHub API", version="0.1.0")
    app.state.engine = engine if engine is not None else build_engine()
    app.state.blob_store = blob_store or LocalBlobStore(settings.upload_dir_path, settings.public_files_url)

    add_security_middleware(app)

    @app.on_event("startup")
    def on_startup():
        create_db_and_tables(app.state.engine)

    app.include_router(auth.router, prefix="/auth")
    app.include_router(datasets.router, prefix="/datasets")
    app.include_router(questions.router, prefix="/questions")
    app.include_router(answers.router, prefix="/answers")
    app.include_router(system.router, prefix="/system")

    # Blobs are served locally only when their URLs are app-relative.
    base_url = app.state.blob_store.base_url
    if base_url.startswith("/"):
        ensure_dir(app.state.blob_store.root)
        app.mount(base_url, StaticFiles(directory=app.state.blob_store.root), name="files")
    return app


app = create_app()
