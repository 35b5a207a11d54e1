"""Authentication service for JWT, password handling and account tokens."""

import secrets
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from pizzeria.config import get_settings
from pizzeria.models.enums import UserRole
from pizzeria.models.user import User

settings = get_settings()

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_RESET_TTL = timedelta(hours=1)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user_id: int, email: str, role: str) -> str:
    """Create a JWT access token."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expiration_minutes)
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "exp": expire,
    }
    encoded_jwt = jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return payload
    except JWTError:
        return None


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email (case-insensitive)."""
    return db.query(User).filter(User.email == email.lower()).first()


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    phone: str | None = None,
    address: dict | None = None,
    role: UserRole = UserRole.USER,
) -> User:
    """Create a new user with a pending email verification token."""
    user = User(
        email=email.lower(),
        password_hash=get_password_hash(password),
        name=name,
        phone=phone,
        address=address,
        role=role,
        email_verification_token=secrets.token_hex(32),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def verify_email_token(db: Session, token: str) -> User | None:
    """Mark the account owning a verification token as verified."""
    user = db.query(User).filter(User.email_verification_token == token).first()
    if not user:
        return None
    user.is_email_verified = True
    user.email_verification_token = None
    db.commit()
    return user


def issue_password_reset(db: Session, user: User) -> str:
    """Store a fresh one-hour reset token on the user and return it."""
    token = secrets.token_hex(32)
    user.password_reset_token = token
    user.password_reset_expires = datetime.now(UTC) + PASSWORD_RESET_TTL
    db.commit()
    return token


def reset_password(db: Session, token: str, new_password: str) -> User | None:
    """Replace the password if the reset token is known and unexpired."""
    user = db.query(User).filter(User.password_reset_token == token).first()
    if not user or user.password_reset_expires is None:
        return None

    expires = user.password_reset_expires
    if expires.tzinfo is None:
        # SQLite drops tzinfo on the way back
        expires = expires.replace(tzinfo=UTC)
    if expires < datetime.now(UTC):
        return None

    user.password_hash = get_password_hash(new_password)
    user.password_reset_token = None
    user.password_reset_expires = None
    db.commit()
    return user
