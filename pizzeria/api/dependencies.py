"""FastAPI dependencies for authentication, database and shared services."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pizzeria.database import get_db
from pizzeria.models.user import User
from pizzeria.services.auth import decode_access_token
from pizzeria.services.email_service import EmailService
from pizzeria.services.inventory import InventoryService
from pizzeria.services.inventory_monitor import InventoryMonitor
from pizzeria.services.order_service import OrderService
from pizzeria.services.payment_gateway import PaymentGateway

security = HTTPBearer()


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    token = credentials.credentials
    payload = decode_access_token(token)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == int(user_id)).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Require an administrator."""
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return current_user


def get_email_service(request: Request) -> EmailService:
    """Email service created by the application lifespan."""
    return request.app.state.email_service


def get_payment_gateway(request: Request) -> PaymentGateway:
    """Payment gateway created by the application lifespan."""
    return request.app.state.payment_gateway


def get_inventory_monitor(request: Request) -> InventoryMonitor:
    """Inventory monitor created by the application lifespan."""
    return request.app.state.inventory_monitor


def get_inventory_service(
    db: Annotated[Session, Depends(get_db)],
) -> InventoryService:
    """Get inventory service with dependencies."""
    return InventoryService(db)


def get_order_service(
    db: Annotated[Session, Depends(get_db)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
    gateway: Annotated[PaymentGateway, Depends(get_payment_gateway)],
) -> OrderService:
    """Get order service with dependencies."""
    return OrderService(db, email_service, gateway)
