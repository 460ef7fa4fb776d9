"""
FastAPI application factory.

Run with ``uvicorn vilanow.app:create_app --factory``.
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from vilanow import __version__
from vilanow.core.config import Settings, get_settings
from vilanow.core.utils import configure_logging
from vilanow.registry import ModelRegistry, build_registry
from vilanow.routers import admin as admin_router
from vilanow.routers import auth as auth_router
from vilanow.routers import chat as chat_router
from vilanow.routers import community as community_router
from vilanow.routers import credits as credits_router
from vilanow.routers import gamification as gamification_router
from vilanow.routers import inspections as inspections_router
from vilanow.routers import interests as interests_router
from vilanow.routers import notifications as notifications_router
from vilanow.routers import properties as properties_router
from vilanow.routers import property_requests as property_requests_router
from vilanow.services.admin_service import AdminService
from vilanow.services.auth_service import AuthService
from vilanow.services.chat_service import ChatService
from vilanow.services.community_service import CommunityService
from vilanow.services.credit_service import CreditService
from vilanow.services.gamification_service import GamificationService
from vilanow.services.inspection_service import InspectionService
from vilanow.services.interest_service import InterestService
from vilanow.services.notification_service import NotificationService
from vilanow.services.payments import PaymentVerifier, PaystackVerifier
from vilanow.services.property_service import PropertyService
from vilanow.services.request_service import RequestService

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Baseline security headers for JSON responses."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app(
    settings: Optional[Settings] = None,
    registry: Optional[ModelRegistry] = None,
    payment_verifier: Optional[PaymentVerifier] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    registry = registry or build_registry(settings)

    app = FastAPI(title="VilaNow API", version=__version__)
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(settings.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    notifier = NotificationService(registry.notifications)
    app.state.settings = settings
    app.state.registry = registry
    app.state.notification_service = notifier
    app.state.auth_service = AuthService(registry, settings)
    app.state.property_service = PropertyService(registry, notifier)
    app.state.request_service = RequestService(registry)
    app.state.interest_service = InterestService(registry, settings, notifier)
    if payment_verifier is None and settings.paystack_secret_key:
        payment_verifier = PaystackVerifier(settings.paystack_secret_key)
    if payment_verifier is None:
        logger.warning("PAYSTACK_SECRET_KEY not set; credit purchases are disabled")
    app.state.credit_service = CreditService(registry, payment_verifier)
    app.state.chat_service = ChatService(registry, notifier)
    app.state.inspection_service = InspectionService(registry, notifier)
    app.state.gamification_service = GamificationService(registry)
    app.state.community_service = CommunityService(registry)
    app.state.admin_service = AdminService(registry)

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok", "version": __version__, "backends": registry.backends()}

    app.include_router(auth_router.router)
    app.include_router(properties_router.router)
    app.include_router(property_requests_router.router)
    app.include_router(interests_router.router)
    app.include_router(credits_router.router)
    app.include_router(notifications_router.router)
    app.include_router(chat_router.router)
    app.include_router(inspections_router.router)
    app.include_router(gamification_router.router)
    app.include_router(community_router.router)
    app.include_router(admin_router.router)

    logger.info("VilaNow API ready (%s)", settings.app_env)
    return app
