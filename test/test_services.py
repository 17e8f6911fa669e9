"""
Service-level behavior that is awkward to reach over HTTP.
"""
import pytest

from database.models import ActivityLog, Detainee, User, UserRole
from schemas.detainee import DetaineeCreate
from services.audit_service import AuditService
from services.auth_service import AuthService
from services.detainee_service import Attachment, DetaineeService, SearchCriteria
from services.user_service import UserService
from storage.local_store import LocalBlobStore
from core.exceptions import DuplicateCedula, NoCriteria, SessionConflict, ValidationError
from conftest import DEFAULT_PASSWORD, JPEG_BYTES


@pytest.fixture
def officer(db_session, make_user):
    return db_session.get(User, make_user("officer1", role=UserRole.OFFICER))


def _data(cedula="12345678"):
    return DetaineeCreate(
        full_name="Pedro Linares", cedula=cedula, birth_date="1990-01-01",
        state="Lara", municipality="Iribarren", parish="Catedral", address="Calle 20",
    )


def test_audit_failure_does_not_raise(db_session):
    # No user 9999: the foreign key rejects the row
    assert AuditService.log_activity(db_session, 9999, "login", "ghost") is None
    assert AuditService.log_search(db_session, 9999, "cedula: V-1", 0) is None
    assert db_session.query(ActivityLog).count() == 0


def test_search_modes_validate_criteria(db_session, officer):
    with pytest.raises(NoCriteria):
        DetaineeService.search(db_session, officer, SearchCriteria(full_name="  "), advanced=True)
    with pytest.raises(ValidationError):
        DetaineeService.search(db_session, officer, SearchCriteria(state="Lara"))


def test_simple_search_ignores_other_fields(db_session, officer):
    DetaineeService.register(db_session, officer, _data())

    results = DetaineeService.search(db_session, officer, SearchCriteria(cedula="12345678", state="Zulia"))

    assert len(results) == 1


def test_duplicate_registration_discards_stored_attachments(db_session, officer, tmp_path):
    store = LocalBlobStore(tmp_path / "blobs")
    photo = Attachment(field="photo", filename="p.jpg", content_type="image/jpeg", data=JPEG_BYTES)
    DetaineeService.register(db_session, officer, _data(), photo=photo, blob_store=store)

    with pytest.raises(DuplicateCedula):
        DetaineeService.register(db_session, officer, _data("V-12345678"), photo=photo, blob_store=store)

    stored = [p for p in (tmp_path / "blobs").rglob("*") if p.is_file()]
    assert len(stored) == 1
    assert db_session.query(Detainee).count() == 1


def test_registration_stores_references(db_session, officer, tmp_path):
    store = LocalBlobStore(tmp_path / "blobs")
    photo = Attachment(field="photo", filename="p.jpg", content_type="image/jpeg", data=JPEG_BYTES)

    detainee = DetaineeService.register(db_session, officer, _data(), photo=photo, blob_store=store)

    assert detainee.photo_url.startswith("local://detainees/cedula=V-12345678/photo/")
    assert store.read(detainee.photo_url) == JPEG_BYTES
    assert detainee.registered_by == officer.id


def test_local_store_refuses_paths_outside_base(tmp_path):
    store = LocalBlobStore(tmp_path / "blobs")

    with pytest.raises(ValueError):
        store.put(b"x", "../escape.jpg")


def test_login_conflict_at_service_level(db_session, officer):
    AuthService.login(db_session, "officer1", DEFAULT_PASSWORD)

    with pytest.raises(SessionConflict):
        AuthService.login(db_session, "officer1", DEFAULT_PASSWORD)


def test_ensure_default_admin_runs_once(db_session):
    first = UserService.ensure_default_admin(db_session)
    second = UserService.ensure_default_admin(db_session)

    assert first is not None and first.role == UserRole.ADMIN
    assert second is None
