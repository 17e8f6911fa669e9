"""
Identity document extraction.

No recognition engine is wired in yet; every document yields the same sample
result so the registration form can be exercised end to end.
"""
from schemas.detainee import OcrResult
from services.detainee_service import Attachment, DetaineeService
from core.logger import logger

SAMPLE_RESULT = {
    "full_name": "JUAN CARLOS RODRIGUEZ",
    "cedula": "V-12345678",
    "birth_date": "1985-03-15",
    "confidence": 0.85,
}


class OcrService:

    @staticmethod
    def process(document: Attachment) -> OcrResult:
        """
        Extract identity fields from a document image.

        Raises:
            ValidationError: Empty, oversized or non-image upload
        """
        DetaineeService.validate_attachment(document)
        logger.info(f"OCR requested for {document.filename or 'upload'} ({len(document.data)} bytes)")
        return OcrResult(**SAMPLE_RESULT)
