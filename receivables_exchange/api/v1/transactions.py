"""GET /v1/transactions - purchase history for buyers and sellers"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from receivables_exchange.api.dependencies import get_current_principal
from receivables_exchange.api.v1.schemas import TransactionResponse
from receivables_exchange.domain.models import Principal
from receivables_exchange.infrastructure.database.session import get_db
from receivables_exchange.services.securities import SecurityService

router = APIRouter()


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """Transactions where the caller is buyer or seller, newest first"""
    return SecurityService(db).transactions_for_user(principal)


@router.get("/transactions/{security_id}", response_model=List[TransactionResponse])
def list_security_transactions(
    security_id: str,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return SecurityService(db).transactions_for_security(principal, security_id)
