"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pizzeria.api import admin, auth, orders, pizza, webhooks, websocket
from pizzeria.api.errors import register_exception_handlers
from pizzeria.config import get_settings
from pizzeria.database import SessionLocal
from pizzeria.logging_config import configure_logging
from pizzeria.services.email_service import EmailService
from pizzeria.services.inventory_monitor import InventoryMonitor
from pizzeria.services.payment_gateway import PaymentGateway

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    email_service = EmailService(settings)
    email_service.start()
    monitor = InventoryMonitor(
        SessionLocal, email_service, settings.inventory_check_interval_minutes
    )

    app.state.email_service = email_service
    app.state.payment_gateway = PaymentGateway(settings)
    app.state.inventory_monitor = monitor

    if settings.inventory_monitor_enabled:
        await monitor.start()
    else:
        logger.info("Inventory monitor disabled")

    yield

    await monitor.stop()
    email_service.close()


app = FastAPI(
    title="Pizzeria API",
    description="Build-your-own pizza ordering with payments and inventory tracking",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.client_url, "http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

register_exception_handlers(app)

# Register routers
app.include_router(auth.router)
app.include_router(pizza.router)
app.include_router(orders.router)
app.include_router(admin.router)
app.include_router(webhooks.router)
app.include_router(websocket.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"success": True, "status": "healthy", "environment": settings.environment}
