"""
FastAPI dependencies: database session, principal and services.

The identity layer sits upstream; it forwards the authenticated principal
as ``X-User-Id`` and ``X-User-Role`` headers which are trusted here.
"""

from typing import Generator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from homestay.config.settings import Settings
from homestay.core.exceptions import AuthenticationRequiredError, AuthorizationError
from homestay.db.session import Database
from homestay.models.enums import UserRole
from homestay.schemas.common import Principal
from homestay.services.base import Clock
from homestay.services.booking.booking_service import BookingService
from homestay.services.pricing.seasonal_pricing_service import SeasonalPricingService
from homestay.utils.date_utils import now_utc


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    """
    Dependency function that yields a database session.

    Usage in FastAPI endpoints:
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    yield from database.get_db()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_clock(request: Request) -> Clock:
    return getattr(request.app.state, "clock", None) or now_utc


def get_current_principal(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> Principal:
    if not x_user_id or not x_user_role:
        raise AuthenticationRequiredError()
    try:
        role = UserRole(x_user_role.strip().lower())
    except ValueError as e:
        raise AuthorizationError(f"Unknown role '{x_user_role}'") from e
    return Principal(id=x_user_id.strip(), role=role)


def get_booking_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
) -> BookingService:
    return BookingService(db, settings=settings, clock=clock)


def get_pricing_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    clock: Clock = Depends(get_clock),
) -> SeasonalPricingService:
    return SeasonalPricingService(db, settings=settings, clock=clock)


__all__ = [
    "get_database",
    "get_db",
    "get_app_settings",
    "get_clock",
    "get_current_principal",
    "get_booking_service",
    "get_pricing_service",
]
