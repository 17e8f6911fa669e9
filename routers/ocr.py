"""
Identity document OCR API.
"""
from fastapi import APIRouter, Depends, File, UploadFile

from auth.dependencies import RequestContext, require_registration
from schemas.detainee import OcrResult
from services.ocr_service import OcrService
from routers.detainees import read_upload
from core.exceptions import ValidationError


router = APIRouter(prefix="/api/ocr", tags=["ocr"])


@router.post("/process", response_model=OcrResult)
async def process_document(
    document: UploadFile = File(...),
    ctx: RequestContext = Depends(require_registration)
):
    """Extract name, cedula and birth date from an identity document image."""
    attachment = await read_upload(document, "document")
    if attachment is None:
        raise ValidationError("Document image is required",
                              errors=[{"field": "document", "message": "Required"}])
    return OcrService.process(attachment)
