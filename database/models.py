"""
Database models for the detainee registry.
"""
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Text,
    ForeignKey, Index, TypeDecorator
)
from sqlalchemy.orm import declarative_base, relationship
import enum

from core.utils import local_now

Base = declarative_base()


# ============================================================================
# Custom Type Decorator for Enum Values
# ============================================================================

class EnumValue(TypeDecorator):
    """Type decorator to ensure enum values (not names) are stored."""
    impl = String
    cache_ok = True

    def __init__(self, enum_class, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        """Convert enum to its value when writing to database."""
        if value is None:
            return None
        if isinstance(value, enum.Enum):
            return value.value
        return value

    def process_result_value(self, value, dialect):
        """Convert database value back to enum when reading."""
        if value is None:
            return None
        if isinstance(value, str):
            try:
                return self.enum_class(value)
            except ValueError:
                return value
        return value


# ============================================================================
# Enums - Must be defined before models that use them
# ============================================================================

class UserRole(str, enum.Enum):
    """User roles for authorization."""
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    OFFICER = "officer"
    AGENT = "agent"


class UserStatus(str, enum.Enum):
    """User account status."""
    ACTIVE = "active"
    SUSPENDED = "suspended"


# ============================================================================
# Models
# ============================================================================

class User(Base):
    """User model for authentication and authorization."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    role = Column(EnumValue(UserRole, 20), default=UserRole.OFFICER, nullable=False)
    profile_image_url = Column(String(512), nullable=True)

    # Suspension: both fields are set iff status == suspended
    status = Column(EnumValue(UserStatus, 20), default=UserStatus.ACTIVE, nullable=False)
    suspended_until = Column(DateTime, nullable=True)
    suspended_reason = Column(Text, nullable=True)

    # Id of the single live session (sessions.sid), NULL when logged out
    active_session_id = Column(String(64), unique=True, nullable=True)

    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=local_now, nullable=False)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now, nullable=False)

    # Relationships
    sessions = relationship("Session", back_populates="user", passive_deletes=True)
    activity_logs = relationship("ActivityLog", back_populates="user", passive_deletes="all")
    search_logs = relationship("SearchLog", back_populates="user", passive_deletes="all")
    detainees = relationship("Detainee", back_populates="registered_by_user", passive_deletes="all")

    __table_args__ = (
        Index('idx_user_role', 'role'),
        Index('idx_user_status', 'status'),
    )

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class Session(Base):
    """Server-side session. The raw token is never stored, only its SHA-256 hash."""
    __tablename__ = "sessions"

    sid = Column(String(64), primary_key=True)
    # One session row per user at most
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    ip_address = Column(String(45), nullable=True)  # IPv6 compatible
    user_agent = Column(String(500), nullable=True)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=local_now, nullable=False)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index('idx_session_expire', 'expires_at'),
    )


class Detainee(Base):
    """Registered detainee record."""
    __tablename__ = "detainees"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    cedula = Column(String(20), unique=True, nullable=False)  # Normalized: V-12345678 / E-12345678
    birth_date = Column(Date, nullable=False)
    state = Column(String(100), nullable=False)
    municipality = Column(String(100), nullable=False)
    parish = Column(String(100), nullable=False)
    address = Column(Text, nullable=False)
    registro = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    photo_url = Column(String(512), nullable=True)
    id_document_url = Column(String(512), nullable=True)
    registered_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=local_now, nullable=False)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now, nullable=False)

    registered_by_user = relationship("User", back_populates="detainees")

    __table_args__ = (
        Index('idx_detainee_created', 'created_at'),
        Index('idx_detainee_location', 'state', 'municipality', 'parish'),
    )


class SearchLog(Base):
    """Append-only record of every detainee search."""
    __tablename__ = "search_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    search_term = Column(String(500), nullable=False)
    results_count = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=local_now, nullable=False)

    user = relationship("User", back_populates="search_logs")

    __table_args__ = (
        Index('idx_search_log_user', 'user_id'),
        Index('idx_search_log_created', 'created_at'),
    )


class ActivityLog(Base):
    """Append-only audit trail of user actions (login, search, registration, admin operations)."""
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    action = Column(String(50), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=local_now, nullable=False)

    user = relationship("User", back_populates="activity_logs")

    __table_args__ = (
        Index('idx_activity_user', 'user_id'),
        Index('idx_activity_action', 'action'),
        Index('idx_activity_created', 'created_at'),
    )
