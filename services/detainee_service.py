"""
Detainee registry service: registration with attachments, lookup and
multi-criteria search.
"""
from dataclasses import dataclass
from functools import reduce
from typing import List, Optional, Tuple
from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.models import Detainee, User
from schemas.detainee import DetaineeCreate
from services.audit_service import AuditService
from storage.paths import PHOTO, ID_DOCUMENT, detainee_attachment_key
from core.exceptions import DuplicateCedula, NoCriteria, NotFound, ValidationError
from core.validators import (
    escape_like, normalize_cedula, validate_file_size, validate_image_extension
)
from core.logger import logger
import config

# Searchable fields in serialization order, with their wire names
SEARCH_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("cedula", "cedula"),
    ("full_name", "fullName"),
    ("state", "state"),
    ("municipality", "municipality"),
    ("parish", "parish"),
)


@dataclass(frozen=True)
class Attachment:
    """An uploaded file held in memory."""
    field: str
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


@dataclass(frozen=True)
class SearchCriteria:
    cedula: Optional[str] = None
    full_name: Optional[str] = None
    state: Optional[str] = None
    municipality: Optional[str] = None
    parish: Optional[str] = None

    def present(self) -> Tuple[Tuple[str, str], ...]:
        """(field, value) pairs for the non-blank criteria; blanks impose no predicate."""
        pairs = []
        for name, _ in SEARCH_FIELDS:
            value = getattr(self, name)
            if value is not None and value.strip():
                pairs.append((name, value.strip()))
        return tuple(pairs)

    def describe(self) -> str:
        """Human-readable form stored in the search log, e.g. "cedula: V-123, state: Zulia"."""
        labels = dict(SEARCH_FIELDS)
        parts = []
        for name, value in self.present():
            if name == "cedula":
                value = normalize_cedula(value)
            parts.append(f"{labels[name]}: {value}")
        return ", ".join(parts)


def _predicate(field: str, value: str):
    if field == "cedula":
        return Detainee.cedula == normalize_cedula(value)
    if field == "full_name":
        return Detainee.full_name.ilike(f"%{escape_like(value)}%", escape="\\")
    return getattr(Detainee, field) == value


def build_predicates(criteria: SearchCriteria) -> tuple:
    """Fold each present criterion into a new predicate tuple; ANDed by the caller."""
    return reduce(
        lambda acc, item: acc + (_predicate(*item),),
        criteria.present(),
        ()
    )


class DetaineeService:
    """Service for detainee records."""

    @staticmethod
    def validate_attachment(attachment: Attachment) -> None:
        """
        Reject empty, oversized or non-image uploads.

        Raises:
            ValidationError: With the offending field name
        """
        max_bytes = config.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        is_valid, error_message = validate_file_size(len(attachment.data), max_bytes)
        if not is_valid:
            raise ValidationError(error_message, errors=[{"field": attachment.field, "message": error_message}])

        content_type = (attachment.content_type or "").split(";")[0].strip().lower()
        if content_type not in config.ALLOWED_IMAGE_CONTENT_TYPES and not validate_image_extension(
            attachment.filename, config.ALLOWED_IMAGE_EXTENSIONS
        ):
            message = "Only image files are accepted (jpg, png, webp, bmp)"
            raise ValidationError(message, errors=[{"field": attachment.field, "message": message}])

    @staticmethod
    def register(
        db: Session,
        actor: User,
        data: DetaineeCreate,
        photo: Optional[Attachment] = None,
        id_document: Optional[Attachment] = None,
        blob_store=None
    ) -> Detainee:
        """
        Register a detainee.

        Args:
            db: Database session
            actor: Registering user (becomes registered_by)
            data: Validated fields; cedula already normalized
            photo: Optional photo upload
            id_document: Optional identity document image
            blob_store: Attachment store (defaults to config.blob_store)

        Returns:
            Created Detainee

        Raises:
            ValidationError: Invalid attachment
            DuplicateCedula: Cedula already registered
        """
        attachments = [a for a in (photo, id_document) if a is not None]
        for attachment in attachments:
            DetaineeService.validate_attachment(attachment)

        store = blob_store or config.blob_store
        if attachments and store is None:
            raise RuntimeError("Attachment storage not initialized")

        stored = []
        references = {}
        for attachment, kind in ((photo, PHOTO), (id_document, ID_DOCUMENT)):
            if attachment is None:
                continue
            key = detainee_attachment_key(data.cedula, kind, attachment.filename, attachment.content_type)
            reference = store.put(attachment.data, key, attachment.content_type)
            stored.append(reference)
            references[kind] = reference

        detainee = Detainee(
            full_name=data.full_name,
            cedula=data.cedula,
            birth_date=data.birth_date,
            state=data.state,
            municipality=data.municipality,
            parish=data.parish,
            address=data.address,
            registro=data.registro,
            phone=data.phone,
            photo_url=references.get(PHOTO),
            id_document_url=references.get(ID_DOCUMENT),
            registered_by=actor.id,
        )
        db.add(detainee)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            DetaineeService._discard(store, stored)
            logger.warning(f"Duplicate cedula rejected: {data.cedula} (user {actor.username})")
            raise DuplicateCedula()
        db.refresh(detainee)

        logger.info(f"Detainee {detainee.id} registered by {actor.username}")
        AuditService.log_activity(db, actor.id, "registration", f"Registered detainee: {detainee.full_name}")
        return detainee

    @staticmethod
    def _discard(store, references: List[str]) -> None:
        for reference in references:
            try:
                store.delete(reference)
            except Exception as e:
                logger.error(f"Failed to remove orphaned attachment {reference}: {e}")

    @staticmethod
    def get(db: Session, detainee_id: int) -> Detainee:
        detainee = db.get(Detainee, detainee_id)
        if detainee is None:
            raise NotFound("Detainee not found")
        return detainee

    @staticmethod
    def list_all(db: Session) -> List[Detainee]:
        return db.query(Detainee).order_by(Detainee.created_at.desc(), Detainee.id.desc()).all()

    @staticmethod
    def search(db: Session, actor: User, criteria: SearchCriteria, advanced: bool = False) -> List[Detainee]:
        """
        Search detainees; every present criterion is ANDed.

        Simple mode requires a cedula and ignores the other fields. Advanced
        mode accepts any non-empty subset. Both modes write a search log and an
        activity row, including on zero results.

        Raises:
            ValidationError: Simple search without cedula, or a malformed cedula
            NoCriteria: Advanced search with every field blank
        """
        if advanced:
            if not criteria.present():
                raise NoCriteria()
        else:
            if not criteria.cedula or not criteria.cedula.strip():
                raise ValidationError("Cedula is required",
                                      errors=[{"field": "cedula", "message": "Cedula is required"}])
            criteria = SearchCriteria(cedula=criteria.cedula)

        if criteria.cedula and criteria.cedula.strip():
            try:
                normalize_cedula(criteria.cedula)
            except ValueError as e:
                raise ValidationError(str(e), errors=[{"field": "cedula", "message": str(e)}])

        predicates = build_predicates(criteria)
        results = (
            db.query(Detainee)
            .filter(and_(*predicates))
            .order_by(Detainee.created_at.desc(), Detainee.id.desc())
            .all()
        )

        description = criteria.describe()
        logger.info(f"Search by {actor.username} [{description}] -> {len(results)} results")
        AuditService.log_search(db, actor.id, description, len(results))
        AuditService.log_activity(
            db, actor.id,
            "advanced_search" if advanced else "search",
            f"Searched for {description}"
        )
        return results
