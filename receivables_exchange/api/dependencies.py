"""Dependency injection for FastAPI endpoints"""

from typing import Optional
from fastapi import Depends, Request
from sqlalchemy.orm import Session
from receivables_exchange.config import settings
from receivables_exchange.domain.exceptions import UnauthorizedError
from receivables_exchange.domain.models import Principal
from receivables_exchange.infrastructure.clients.payment import SimulatedPaymentGateway
from receivables_exchange.infrastructure.database.session import get_db
from receivables_exchange.services.accounts import AccountService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_principal_id(request: Request) -> str:
    """User id asserted by the upstream identity provider"""
    user_id: Optional[str] = request.headers.get(settings.principal_header)
    if not user_id:
        raise UnauthorizedError("Authentication required")
    return user_id


def get_current_principal(
    user_id: str = Depends(get_principal_id),
    db: Session = Depends(get_db),
) -> Principal:
    """Registered principal for the request"""
    return AccountService(db).resolve_principal(user_id)


def get_payment_gateway() -> SimulatedPaymentGateway:
    """Provide payment gateway instance"""
    return SimulatedPaymentGateway()
