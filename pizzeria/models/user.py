"""User model."""

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, Integer, String

from pizzeria.database import Base
from pizzeria.models.enums import UserRole
from pizzeria.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication, order ownership and admin alerts."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    # {"street": ..., "city": ..., "state": ..., "zip_code": ..., "landmark": ...}
    address = Column(JSON, nullable=True)
    role = Column(
        Enum(UserRole, name="userrole", values_callable=lambda x: [e.value for e in x]),
        default=UserRole.USER,
        nullable=False,
        index=True,
    )
    is_email_verified = Column(Boolean, nullable=False, default=False)
    email_verification_token = Column(String(64), nullable=True, index=True)
    password_reset_token = Column(String(64), nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)

    @property
    def is_admin(self) -> bool:
        """Check if the user has the admin role."""
        return self.role == UserRole.ADMIN
