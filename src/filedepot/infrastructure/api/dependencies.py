"""FastAPI dependencies wiring the upload pipeline to request handlers.

Long-lived collaborators (settings, database manager, storage writer) are
created by the application factory and read from ``app.state``; everything
else is built per request around the request's database session.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from filedepot.core.config import Settings
from filedepot.domain.services.file_management_service import FileManagementService
from filedepot.domain.services.file_validator import FileValidator
from filedepot.domain.services.upload_orchestrator import UploadOrchestrator
from filedepot.infrastructure.api.upload_transport import MultipartUploadAdapter
from filedepot.infrastructure.persistence.database import get_db_session
from filedepot.infrastructure.persistence.repositories.file_repository import FileRepository
from filedepot.infrastructure.storage.base import StorageWriter


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage_writer(request: Request) -> StorageWriter:
    return request.app.state.storage


AppSettings = Annotated[Settings, Depends(get_app_settings)]
Storage = Annotated[StorageWriter, Depends(get_storage_writer)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


def get_file_repository(session: DbSession) -> FileRepository:
    return FileRepository(session)


def get_file_validator(settings: AppSettings) -> FileValidator:
    return FileValidator(
        allowed_types=settings.allowed_file_types,
        max_file_size=settings.max_file_size,
    )


def get_upload_adapter(settings: AppSettings) -> MultipartUploadAdapter:
    return MultipartUploadAdapter.from_settings(settings)


Repository = Annotated[FileRepository, Depends(get_file_repository)]


def get_file_management_service(repository: Repository, storage: Storage) -> FileManagementService:
    return FileManagementService(repository=repository, writer=storage)


def get_upload_orchestrator(
    repository: Repository,
    storage: Storage,
    validator: Annotated[FileValidator, Depends(get_file_validator)],
) -> UploadOrchestrator:
    return UploadOrchestrator(validator=validator, writer=storage, recorder=repository)


FileService = Annotated[FileManagementService, Depends(get_file_management_service)]
Orchestrator = Annotated[UploadOrchestrator, Depends(get_upload_orchestrator)]
UploadAdapter = Annotated[MultipartUploadAdapter, Depends(get_upload_adapter)]
