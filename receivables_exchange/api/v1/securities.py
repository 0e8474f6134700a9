"""Securitization, listing, marketplace, purchase and settlement endpoints"""

import time
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from receivables_exchange.api.dependencies import get_current_principal, get_payment_gateway, get_request_id
from receivables_exchange.api.v1.schemas import (
    PurchaseRequest,
    PurchaseResponse,
    SecuritizeRequest,
    SecurityResponse,
    TransactionResponse,
)
from receivables_exchange.domain.exceptions import AlreadyPurchasedError, SecurityNotAvailableError
from receivables_exchange.domain.models import Principal, RiskGrade, SecurityDraft
from receivables_exchange.infrastructure.clients.payment import SimulatedPaymentGateway
from receivables_exchange.infrastructure.database.session import get_db
from receivables_exchange.infrastructure.observability.logging import log_purchase, log_settlement
from receivables_exchange.infrastructure.observability.metrics import (
    record_purchase,
    record_purchase_failure,
    settlement_counter,
)
from receivables_exchange.services.purchase import PurchaseService
from receivables_exchange.services.receivables import ReceivableService
from receivables_exchange.services.securities import SecurityService
from receivables_exchange.services.settlement import SettlementService

router = APIRouter()


@router.post("/securities/securitize/{receivable_id}", response_model=SecurityResponse)
def securitize_receivable(
    receivable_id: str,
    request_body: SecuritizeRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Turn a draft/active receivable into a security (status securitized)"""
    draft = SecurityDraft(
        title=request_body.title,
        description=request_body.description,
        total_value=request_body.total_value,
        expected_return=request_body.expected_return,
        risk_grade=request_body.risk_grade,
        duration=request_body.duration,
    )
    return ReceivableService(db).securitize(principal, receivable_id, draft)


@router.get("/securities", response_model=List[SecurityResponse])
def list_own_securities(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return SecurityService(db).list_own(principal)


@router.post("/securities/{security_id}/list", response_model=SecurityResponse)
def list_security(
    security_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return SecurityService(db).list_security(principal, security_id)


@router.post("/securities/{security_id}/purchase", response_model=PurchaseResponse)
def purchase_security(
    security_id: str,
    request: Request,
    request_body: Optional[PurchaseRequest] = None,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    gateway: SimulatedPaymentGateway = Depends(get_payment_gateway),
):
    """
    Buy a listed security.

    Flow:
    1. Guarded listed -> purchased update (409 if someone else won)
    2. Record transaction, mark receivable sold, credit merchant
    3. Notify merchant and investor
    """
    start_time = time.time()
    payment_method = (request_body or PurchaseRequest()).payment_method

    try:
        outcome = PurchaseService(db, gateway=gateway).purchase_security(principal, security_id, payment_method)
    except AlreadyPurchasedError:
        record_purchase_failure("conflict")
        raise
    except SecurityNotAvailableError:
        record_purchase_failure("unavailable")
        raise

    duration_ms = (time.time() - start_time) * 1000
    record_purchase(outcome.security.total_value, outcome.commission)
    log_purchase(
        get_request_id(request),
        principal.user_id,
        security_id,
        outcome.security.total_value,
        outcome.commission,
        outcome.transaction.transaction_id,
        duration_ms,
    )

    return PurchaseResponse(
        security=SecurityResponse.model_validate(outcome.security),
        transaction=TransactionResponse.model_validate(outcome.transaction),
        commission=outcome.commission,
        total_amount=outcome.total_amount,
    )


@router.post("/securities/{security_id}/payment-due", response_model=SecurityResponse)
def flag_payment_due(
    security_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return SecurityService(db).flag_payment_due(principal, security_id)


@router.post("/securities/{security_id}/mark-paid", response_model=SecurityResponse)
def mark_security_paid(
    security_id: str,
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Settle a purchased security and credit the investor the full face value"""
    start_time = time.time()
    paid = SettlementService(db).mark_security_paid(principal, security_id)

    settlement_counter.inc()
    log_settlement(
        get_request_id(request),
        principal.user_id,
        security_id,
        paid.purchased_by,
        paid.total_value,
        (time.time() - start_time) * 1000,
    )
    return paid


@router.post("/securities/{security_id}/cancel", response_model=SecurityResponse)
def cancel_security(
    security_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return SecurityService(db).cancel_security(principal, security_id)


@router.get("/marketplace/securities", response_model=List[SecurityResponse])
def marketplace(
    risk_grade: Optional[RiskGrade] = Query(None, description="Exact risk grade"),
    currency: Optional[str] = Query(None, min_length=3, max_length=3),
    min_value: Optional[Decimal] = Query(None, ge=0),
    max_value: Optional[Decimal] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    """Public listing of securities open for purchase, newest first"""
    return SecurityService(db).marketplace(
        risk_grade=risk_grade.value if risk_grade else None,
        currency=currency,
        min_value=min_value,
        max_value=max_value,
    )


@router.get("/marketplace/securities/{security_id}", response_model=SecurityResponse)
def marketplace_security(security_id: str, db: Session = Depends(get_db)):
    return SecurityService(db).get_public(security_id)


@router.get("/investor/securities", response_model=List[SecurityResponse])
def investor_portfolio(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return SecurityService(db).portfolio(principal)
