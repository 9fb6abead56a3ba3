"""File API endpoints for uploading, listing, renaming and deleting files."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from filedepot.core.logging import get_logger
from filedepot.infrastructure.api.dependencies import FileService, Orchestrator, UploadAdapter
from filedepot.infrastructure.api.schemas.file_schemas import (
    BulkDeleteRequest,
    BulkDeleteResponse,
    ErrorResponse,
    FileListResponse,
    FileRecordResponse,
    MessageResponse,
    RenameFileRequest,
    UploadResponse,
)

logger = get_logger(__name__)

router = APIRouter(tags=["files"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "File not found"}}
BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Invalid request"}}


@router.get(
    "",
    response_model=FileListResponse,
    summary="List files",
    description="List all stored files, newest first.",
)
async def list_files(service: FileService):
    """List all stored files."""
    try:
        files = await service.list_files()
    except SQLAlchemyError as e:
        logger.error("Listing files failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to list files", "message": str(e)},
        )
    return FileListResponse(files=[FileRecordResponse.model_validate(f) for f in files])


@router.get(
    "/{file_id}",
    response_model=FileRecordResponse,
    summary="Get a file",
    responses=NOT_FOUND,
)
async def get_file(file_id: int, service: FileService):
    """Get one stored file's metadata."""
    return await service.get_file(file_id)


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload files",
    responses={400: {"model": UploadResponse, "description": "No file was stored"}},
    description=(
        "Upload one or more files as multipart form data under the 'file' field "
        "(repeated) or 'file[N]' fields. Each file is validated and stored "
        "independently."
    ),
)
async def upload_files(
    request: Request,
    adapter: UploadAdapter,
    orchestrator: Orchestrator,
):
    """Upload a batch of files."""
    async with request.form() as form:
        upload = await adapter.collect(form)
        try:
            if not upload.has_files:
                logger.info("Upload request carried no files")
                return JSONResponse(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    content={"error": "No files uploaded"},
                )
            batch = await orchestrator.process(upload.payload)
        finally:
            await upload.cleanup()

    body = UploadResponse(
        successful=batch.successful,
        failed=batch.failed,
        results=batch.to_list(),
    )
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if batch.any_succeeded else status.HTTP_400_BAD_REQUEST,
        content=body.model_dump(),
    )


@router.put(
    "/{file_id}",
    response_model=FileRecordResponse,
    summary="Rename a file",
    responses={**NOT_FOUND, **BAD_REQUEST},
)
async def rename_file(file_id: int, rename_in: RenameFileRequest, service: FileService):
    """Change a file's display name."""
    return await service.rename_file(file_id, rename_in.original_name)


@router.delete(
    "/{file_id}",
    response_model=MessageResponse,
    summary="Delete a file",
    responses=NOT_FOUND,
)
async def delete_file(file_id: int, service: FileService):
    """Delete a file from disk and from the store."""
    await service.delete_file(file_id)
    return MessageResponse(message="File deleted successfully")


@router.post(
    "/bulk-delete",
    response_model=BulkDeleteResponse,
    summary="Delete several files",
    responses=BAD_REQUEST,
)
async def bulk_delete_files(delete_in: BulkDeleteRequest, service: FileService):
    """Delete every existing file among the given IDs."""
    summary = await service.bulk_delete(delete_in.file_ids)
    return BulkDeleteResponse(
        deleted_count=summary.deleted_count,
        total=summary.total,
        requested_ids=summary.requested_ids,
        deleted_ids=summary.deleted_ids,
        errors=summary.errors,
    )
