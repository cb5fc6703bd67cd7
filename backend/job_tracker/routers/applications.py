import logging
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.datastructures import UploadFile

from job_tracker.dependencies import get_application_store, get_current_user, get_resume_storage
from job_tracker.schemas import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationUpdate,
    MessageResponse,
)
from job_tracker.services import applications as application_service
from job_tracker.services.applications import ApplicationNotFound, ResumeUpload
from job_tracker.services.storage import InvalidUpload, LocalResumeStorage, validate_file_size
from job_tracker.store import ApplicationStore, UserRecord

logger = logging.getLogger(__name__)
router = APIRouter()

RESUME_FIELD = "resume"

SortField = Literal[
    "createdAt", "updatedAt", "dateApplied", "jobTitle", "company", "status", "jobPlatform"
]


async def _read_resume(upload: UploadFile, max_bytes: int) -> ResumeUpload:
    """Read an uploaded resume without buffering more than ``max_bytes + 1``."""
    try:
        if upload.size is not None:
            validate_file_size(upload.size, max_bytes)
        contents = await upload.read(max_bytes + 1)
        validate_file_size(len(contents), max_bytes)
    except InvalidUpload as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ResumeUpload(filename=upload.filename, contents=contents)


async def _read_payload(
    request: Request, model: type[BaseModel], max_bytes: int
) -> tuple[BaseModel, ResumeUpload | None]:
    """Parse a multipart form (with optional resume file) or a JSON body."""
    content_type = request.headers.get("content-type", "")
    resume = None

    if content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Malformed JSON body")
        if not isinstance(data, dict):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Expected a JSON object")
    else:
        form = await request.form()
        data = {}
        for key, value in form.multi_items():
            if key == RESUME_FIELD:
                # Browsers send an empty file part when no file was picked
                if isinstance(value, UploadFile) and value.filename:
                    resume = await _read_resume(value, max_bytes)
            elif isinstance(value, str):
                data[key] = value

    try:
        payload = model.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
    return payload, resume


async def create_payload(
    request: Request,
    storage: LocalResumeStorage = Depends(get_resume_storage),
) -> tuple[ApplicationCreate, ResumeUpload | None]:
    return await _read_payload(request, ApplicationCreate, storage.max_bytes)


async def update_payload(
    request: Request,
    storage: LocalResumeStorage = Depends(get_resume_storage),
) -> tuple[ApplicationUpdate, ResumeUpload | None]:
    return await _read_payload(request, ApplicationUpdate, storage.max_bytes)


def _not_found(e: ApplicationNotFound) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.post("", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
def create_application(
    user: UserRecord = Depends(get_current_user),
    payload: tuple[ApplicationCreate, ResumeUpload | None] = Depends(create_payload),
    store: ApplicationStore = Depends(get_application_store),
    storage: LocalResumeStorage = Depends(get_resume_storage),
):
    """Create a job application, optionally with a resume file."""
    fields, resume = payload
    try:
        return application_service.create_application(
            store, storage, user.id, fields.model_dump(), resume
        )
    except InvalidUpload as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Failed to create application for user %d", user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to save application. Please try again.",
        )


@router.get("", response_model=ApplicationListResponse)
def list_applications(
    status_filter: str | None = Query(None, alias="status", description="Filter by status"),
    platform: str | None = Query(None, description="Filter by job platform"),
    search: str | None = Query(None, description="Search title, company and platform"),
    sort_by: SortField = Query("createdAt", alias="sortBy", description="Field to sort by"),
    order: Literal["asc", "desc"] = Query("desc", description="Sort direction"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=100, description="Items per page"),
    user: UserRecord = Depends(get_current_user),
    store: ApplicationStore = Depends(get_application_store),
):
    """List the current user's applications with optional filters and search."""
    result = application_service.list_applications(
        store,
        user.id,
        status=status_filter,
        platform=platform,
        search=search,
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
    )
    return ApplicationListResponse(
        applications=[ApplicationResponse.model_validate(a) for a in result.applications],
        total=result.total,
        page=result.page,
        limit=result.limit,
        has_next_page=result.has_next_page,
    )


@router.get("/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: int,
    user: UserRecord = Depends(get_current_user),
    store: ApplicationStore = Depends(get_application_store),
):
    try:
        return application_service.get_application(store, user.id, application_id)
    except ApplicationNotFound as e:
        raise _not_found(e)


@router.put("/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_id: int,
    user: UserRecord = Depends(get_current_user),
    payload: tuple[ApplicationUpdate, ResumeUpload | None] = Depends(update_payload),
    store: ApplicationStore = Depends(get_application_store),
    storage: LocalResumeStorage = Depends(get_resume_storage),
):
    """Update an application. Omitted fields and the stored resume are preserved."""
    fields, resume = payload
    try:
        return application_service.update_application(
            store,
            storage,
            user.id,
            application_id,
            fields.model_dump(exclude_unset=True, exclude_none=True),
            resume,
        )
    except ApplicationNotFound as e:
        raise _not_found(e)
    except InvalidUpload as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SQLAlchemyError:
        logger.exception("Failed to update application %d for user %d", application_id, user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to update application. Please try again.",
        )


@router.delete("/{application_id}", response_model=MessageResponse)
def delete_application(
    application_id: int,
    user: UserRecord = Depends(get_current_user),
    store: ApplicationStore = Depends(get_application_store),
):
    try:
        application_service.delete_application(store, user.id, application_id)
    except ApplicationNotFound as e:
        raise _not_found(e)
    except SQLAlchemyError:
        logger.exception("Failed to delete application %d for user %d", application_id, user.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to delete application. Please try again.",
        )

    return MessageResponse(message="Application deleted successfully")
