"""Merchant receivable endpoints"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from receivables_exchange.api.dependencies import get_current_principal
from receivables_exchange.api.v1.schemas import (
    MessageResponse,
    ReceivableCreateRequest,
    ReceivableResponse,
    ReceivableUpdateRequest,
)
from receivables_exchange.domain.models import Principal, ReceivableDraft
from receivables_exchange.infrastructure.database.session import get_db
from receivables_exchange.services.receivables import ReceivableService

router = APIRouter()


@router.get("/receivables", response_model=List[ReceivableResponse])
def list_receivables(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return ReceivableService(db).list_own(principal)


@router.post("/receivables", response_model=ReceivableResponse)
def create_receivable(
    request_body: ReceivableCreateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Create a receivable in draft status"""
    due_diligence = request_body.due_diligence.model_dump(exclude_none=True) if request_body.due_diligence else None
    draft = ReceivableDraft(
        debtor_name=request_body.debtor_name,
        amount=request_body.amount,
        due_date=request_body.due_date,
        currency=request_body.currency,
        description=request_body.description,
        category=request_body.category,
        risk_level=request_body.risk_level,
        due_diligence=due_diligence or None,
    )
    return ReceivableService(db).create(principal, draft)


@router.get("/receivables/{receivable_id}", response_model=ReceivableResponse)
def get_receivable(
    receivable_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return ReceivableService(db).get_own(principal, receivable_id)


@router.put("/receivables/{receivable_id}", response_model=ReceivableResponse)
def update_receivable(
    receivable_id: str,
    request_body: ReceivableUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Edit a receivable that has not been securitized yet"""
    fields = request_body.model_dump(exclude_unset=True)
    if fields.get("due_diligence") is not None:
        fields["due_diligence"] = request_body.due_diligence.model_dump(exclude_none=True)
    return ReceivableService(db).update(principal, receivable_id, fields)


@router.delete("/receivables/{receivable_id}", response_model=MessageResponse)
def delete_receivable(
    receivable_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ReceivableService(db).delete(principal, receivable_id)
    return MessageResponse(message="Receivable deleted successfully")
