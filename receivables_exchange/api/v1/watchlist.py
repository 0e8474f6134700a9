"""Investor watchlist endpoints, including batch purchase"""

import time
from typing import List, Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from receivables_exchange.api.dependencies import get_current_principal, get_payment_gateway, get_request_id
from receivables_exchange.api.v1.schemas import (
    MessageResponse,
    SecurityResponse,
    WatchlistItemResponse,
    WatchlistPurchaseRequest,
    WatchlistPurchaseResponse,
)
from receivables_exchange.domain.models import Principal
from receivables_exchange.infrastructure.clients.payment import SimulatedPaymentGateway
from receivables_exchange.infrastructure.database.session import get_db
from receivables_exchange.infrastructure.observability.logging import log_purchase, log_watchlist_purchase
from receivables_exchange.infrastructure.observability.metrics import record_purchase, record_watchlist_batch
from receivables_exchange.services.purchase import PurchaseService
from receivables_exchange.services.watchlist import WatchlistService

router = APIRouter()


@router.get("/watchlist", response_model=List[WatchlistItemResponse])
def get_watchlist(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Watched securities that are still listed"""
    return WatchlistService(db).current(principal)


@router.post("/watchlist/purchase", response_model=WatchlistPurchaseResponse)
def purchase_watchlist(
    request: Request,
    request_body: Optional[WatchlistPurchaseRequest] = None,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    gateway: SimulatedPaymentGateway = Depends(get_payment_gateway),
):
    """
    Buy everything on the watchlist that is still available.

    Unavailable items are skipped and reported in skipped_security_ids; the
    watchlist is emptied either way.
    """
    start_time = time.time()
    payment_method = (request_body or WatchlistPurchaseRequest()).payment_method

    outcome = PurchaseService(db, gateway=gateway).purchase_watchlist(principal, payment_method)

    duration_ms = (time.time() - start_time) * 1000
    for item in outcome.outcomes:
        record_purchase(item.security.total_value, item.commission)
        log_purchase(
            get_request_id(request),
            principal.user_id,
            item.security.id,
            item.security.total_value,
            item.commission,
            item.transaction.transaction_id,
            duration_ms,
        )

    record_watchlist_batch(len(outcome.purchased), len(outcome.skipped_security_ids))
    log_watchlist_purchase(
        get_request_id(request),
        principal.user_id,
        len(outcome.purchased),
        len(outcome.skipped_security_ids),
        duration_ms,
    )

    return WatchlistPurchaseResponse(
        purchased=[SecurityResponse.model_validate(security) for security in outcome.purchased],
        skipped_security_ids=outcome.skipped_security_ids,
    )


@router.delete("/watchlist", response_model=MessageResponse)
def clear_watchlist(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    WatchlistService(db).clear(principal)
    return MessageResponse(message="Watchlist cleared")


@router.post("/watchlist/{security_id}", response_model=WatchlistItemResponse)
def add_to_watchlist(
    security_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return WatchlistService(db).add(principal, security_id)


@router.delete("/watchlist/{security_id}", response_model=MessageResponse)
def remove_from_watchlist(
    security_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    WatchlistService(db).remove(principal, security_id)
    return MessageResponse(message="Removed from watchlist")
