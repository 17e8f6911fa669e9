"""
Detainee registration and record APIs.
"""
import mimetypes
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import RedirectResponse, Response
from pydantic import ValidationError as SchemaValidationError

from database.models import Detainee
from auth.dependencies import RequestContext, require_registration, require_search
from schemas.detainee import DetaineeCreate, DetaineeResponse
from services.detainee_service import Attachment, DetaineeService
from storage.paths import PHOTO, ID_DOCUMENT
from core.exceptions import NotFound, ValidationError
from core.logger import logger
import config


router = APIRouter(prefix="/api/detainees", tags=["detainees"])


def detainee_payload(detainee: Detainee) -> DetaineeResponse:
    """Record projection; attachment references become API download paths."""
    payload = DetaineeResponse.model_validate(detainee)
    return payload.model_copy(update={
        "photo_url": f"/api/detainees/{detainee.id}/photo" if detainee.photo_url else None,
        "id_document_url": f"/api/detainees/{detainee.id}/id-document" if detainee.id_document_url else None,
    })


async def read_upload(upload: Optional[UploadFile], field: str) -> Optional[Attachment]:
    """
    Read an optional multipart file. At most one byte past the size limit is
    read so oversized files are rejected without buffering them whole.
    """
    if upload is None or not upload.filename:
        return None
    max_bytes = config.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    data = await upload.read(max_bytes + 1)
    await upload.close()
    return Attachment(field=field, filename=upload.filename, content_type=upload.content_type, data=data)


def schema_errors(exc: SchemaValidationError) -> ValidationError:
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())) or "request", "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    return ValidationError(errors=errors)


@router.post("", response_model=DetaineeResponse, status_code=status.HTTP_201_CREATED)
async def register_detainee(
    full_name: str = Form(..., alias="fullName"),
    cedula: str = Form(...),
    birth_date: date = Form(..., alias="birthDate"),
    state: str = Form(...),
    municipality: str = Form(...),
    parish: str = Form(...),
    address: str = Form(...),
    registro: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    id_document: Optional[UploadFile] = File(None, alias="idDocument"),
    ctx: RequestContext = Depends(require_registration)
):
    """
    Register a detainee (multipart form).

    Photo and identity document are optional images of at most 10 MB each.
    A cedula that is already registered yields 409.
    """
    try:
        data = DetaineeCreate(
            full_name=full_name,
            cedula=cedula,
            birth_date=birth_date,
            state=state,
            municipality=municipality,
            parish=parish,
            address=address,
            registro=registro,
            phone=phone,
        )
    except SchemaValidationError as e:
        raise schema_errors(e)

    photo_attachment = await read_upload(photo, "photo")
    document_attachment = await read_upload(id_document, "idDocument")

    detainee = DetaineeService.register(
        ctx.db, ctx.user, data,
        photo=photo_attachment,
        id_document=document_attachment,
    )
    return detainee_payload(detainee)


@router.get("", response_model=List[DetaineeResponse])
async def list_detainees(ctx: RequestContext = Depends(require_search)):
    """All records, newest first."""
    return [detainee_payload(d) for d in DetaineeService.list_all(ctx.db)]


@router.get("/{detainee_id}", response_model=DetaineeResponse)
async def get_detainee(detainee_id: int, ctx: RequestContext = Depends(require_search)):
    return detainee_payload(DetaineeService.get(ctx.db, detainee_id))


def _attachment_response(detainee: Detainee, kind: str):
    reference = detainee.photo_url if kind == PHOTO else detainee.id_document_url
    if not reference:
        raise NotFound("Attachment not found")

    store = config.blob_store
    if store is None:
        raise NotFound("Attachment storage not available")

    url = store.url_for(reference)
    if url:
        return RedirectResponse(url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    try:
        content = store.read(reference)
    except (OSError, ValueError) as e:
        logger.error(f"Attachment {reference} for detainee {detainee.id} unreadable: {e}")
        raise NotFound("Attachment not found")
    media_type = mimetypes.guess_type(reference)[0] or "application/octet-stream"
    return Response(content=content, media_type=media_type)


@router.get("/{detainee_id}/photo")
async def get_photo(detainee_id: int, ctx: RequestContext = Depends(require_search)):
    """Photo bytes, or a redirect to a short-lived S3 URL."""
    return _attachment_response(DetaineeService.get(ctx.db, detainee_id), PHOTO)


@router.get("/{detainee_id}/id-document")
async def get_id_document(detainee_id: int, ctx: RequestContext = Depends(require_search)):
    return _attachment_response(DetaineeService.get(ctx.db, detainee_id), ID_DOCUMENT)
