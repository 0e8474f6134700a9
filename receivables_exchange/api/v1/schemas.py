"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from receivables_exchange.config import settings
from receivables_exchange.domain.models import NotificationType, PaymentMethod, RiskGrade, Role


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str


# Accounts

class RegisterRequest(BaseModel):
    """Request body for POST /v1/auth/register"""

    role: Role
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    """Request body for PUT /v1/profile; only supplied fields change"""

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone_number: Optional[str] = None
    address: Optional[str] = None


class UserResponse(ORMModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: Optional[Role] = None
    wallet_balance: Decimal
    phone_number: Optional[str] = None
    address: Optional[str] = None
    created_at: datetime


# Receivables

class DueDiligence(BaseModel):
    """Supporting evidence a merchant attaches to a receivable"""

    order_photos: Optional[List[str]] = None
    legal_documents: Optional[List[str]] = None
    debtor_contact: Optional[Dict[str, Any]] = None
    order_details: Optional[Dict[str, Any]] = None


class ReceivableCreateRequest(BaseModel):
    """Request body for POST /v1/receivables"""

    debtor_name: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: str = Field(default_factory=lambda: settings.default_currency, min_length=3, max_length=3)
    due_date: date
    description: Optional[str] = None
    category: Optional[str] = None
    risk_level: Optional[str] = None
    due_diligence: Optional[DueDiligence] = None


class ReceivableUpdateRequest(BaseModel):
    """Request body for PUT /v1/receivables/{id}"""

    debtor_name: Optional[str] = Field(None, min_length=1)
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    due_date: Optional[date] = None
    description: Optional[str] = None
    category: Optional[str] = None
    risk_level: Optional[str] = None
    due_diligence: Optional[DueDiligence] = None


class ReceivableResponse(ORMModel):
    id: str
    merchant_id: str
    debtor_name: str
    amount: Decimal
    currency: str
    due_date: date
    description: Optional[str] = None
    category: Optional[str] = None
    risk_level: Optional[str] = None
    due_diligence: Optional[Dict[str, Any]] = None
    status: str
    created_at: datetime


# Securities

class SecuritizeRequest(BaseModel):
    """Request body for POST /v1/securities/securitize/{receivable_id}"""

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    total_value: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    expected_return: Optional[Decimal] = Field(None, ge=0, max_digits=5, decimal_places=2)
    risk_grade: Optional[RiskGrade] = None
    duration: str = Field(..., min_length=1, description='Tenor, e.g. "90 days"')


class SecurityResponse(ORMModel):
    id: str
    receivable_id: str
    merchant_id: str
    title: str
    description: Optional[str] = None
    total_value: Decimal
    currency: str
    expected_return: Optional[Decimal] = None
    risk_grade: Optional[str] = None
    duration: str
    status: str
    listed_at: Optional[datetime] = None
    purchased_by: Optional[str] = None
    purchased_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    transaction_id: Optional[str] = None
    commission_amount: Optional[Decimal] = None
    created_at: datetime


class PurchaseRequest(BaseModel):
    """Request body for POST /v1/securities/{id}/purchase"""

    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD


class TransactionResponse(ORMModel):
    id: str
    security_id: str
    buyer_id: str
    seller_id: str
    amount: Decimal
    currency: str
    commission_amount: Decimal
    payment_method: str
    status: str
    transaction_id: str
    gateway_response: Optional[Dict[str, Any]] = None
    created_at: datetime


class PurchaseResponse(BaseModel):
    """Response for POST /v1/securities/{id}/purchase"""

    security: SecurityResponse
    transaction: TransactionResponse
    commission: Decimal
    total_amount: Decimal


# Watchlist

class WatchlistItemResponse(ORMModel):
    id: str
    user_id: str
    security_id: str
    added_at: datetime
    security: SecurityResponse


class WatchlistPurchaseRequest(BaseModel):
    """Optional body for POST /v1/watchlist/purchase"""

    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD


class WatchlistPurchaseResponse(BaseModel):
    purchased: List[SecurityResponse]
    skipped_security_ids: List[str]


# Notifications

class NotificationResponse(ORMModel):
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    data: Optional[Dict[str, Any]] = None
    read: bool
    created_at: datetime
