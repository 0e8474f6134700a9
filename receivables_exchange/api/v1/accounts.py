"""Registration and profile endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from receivables_exchange.api.dependencies import get_current_principal, get_principal_id
from receivables_exchange.api.v1.schemas import ProfileUpdateRequest, RegisterRequest, UserResponse
from receivables_exchange.domain.models import Principal
from receivables_exchange.infrastructure.database.session import get_db
from receivables_exchange.services.accounts import AccountService

router = APIRouter()


@router.post("/auth/register", response_model=UserResponse)
def register(
    request_body: RegisterRequest,
    user_id: str = Depends(get_principal_id),
    db: Session = Depends(get_db),
):
    """Choose a role (merchant or investor) for the authenticated identity. Allowed once."""
    return AccountService(db).register(
        user_id=user_id,
        role=request_body.role,
        email=request_body.email,
        first_name=request_body.first_name,
        last_name=request_body.last_name,
    )


@router.get("/auth/user", response_model=UserResponse)
def current_user(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return AccountService(db).get_user(principal.user_id)


@router.put("/profile", response_model=UserResponse)
def update_profile(
    request_body: ProfileUpdateRequest,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    return AccountService(db).update_profile(principal.user_id, request_body.model_dump(exclude_unset=True))
