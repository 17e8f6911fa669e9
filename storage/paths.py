"""
Attachment key generation.
"""
import mimetypes
import uuid
from pathlib import Path
from typing import Optional

from core.validators import sanitize_filename

PHOTO = "photo"
ID_DOCUMENT = "id-document"


def _extension(filename: Optional[str], content_type: Optional[str]) -> str:
    ext = Path(filename).suffix.lower() if filename else ""
    if not ext and content_type:
        ext = mimetypes.guess_extension(content_type) or ""
    return ext or ".jpg"


def detainee_attachment_key(cedula: str, kind: str, filename: Optional[str], content_type: Optional[str] = None) -> str:
    """detainees/cedula=V-12345678/photo/3f2a....jpg"""
    folder = sanitize_filename(cedula)
    return f"detainees/cedula={folder}/{kind}/{uuid.uuid4().hex}{_extension(filename, content_type)}"
