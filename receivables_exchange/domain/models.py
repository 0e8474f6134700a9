"""Domain models - pure Python dataclasses and enums representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional


class Role(str, Enum):
    MERCHANT = "merchant"
    INVESTOR = "investor"


class ReceivableStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    SECURITIZED = "securitized"
    LISTED = "listed"
    SOLD = "sold"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class SecurityStatus(str, Enum):
    DRAFT = "draft"
    SECURITIZED = "securitized"
    LISTED = "listed"
    PURCHASED = "purchased"
    PAYMENT_DUE = "payment_due"
    PAID = "paid"
    CANCELLED = "cancelled"


class RiskGrade(str, Enum):
    A = "A"
    A_MINUS = "A-"
    B_PLUS = "B+"
    B = "B"
    B_MINUS = "B-"
    C_PLUS = "C+"
    C = "C"
    C_MINUS = "C-"


class NotificationType(str, Enum):
    SECURITY_PURCHASED = "security_purchased"
    SECURITY_LISTED = "security_listed"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_DUE = "payment_due"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "credit_card"
    BANK_TRANSFER = "bank_transfer"
    CRYPTO = "crypto"
    DIGITAL_WALLET = "digital_wallet"


@dataclass
class Principal:
    """Authenticated caller as supplied by the identity provider"""

    user_id: str
    role: Role


@dataclass
class ReceivableDraft:
    """Merchant input for a new receivable"""

    debtor_name: str
    amount: Decimal
    due_date: date
    currency: str = "USD"
    description: Optional[str] = None
    category: Optional[str] = None
    risk_level: Optional[str] = None
    due_diligence: Optional[Dict[str, Any]] = None


@dataclass
class SecurityDraft:
    """Merchant input when securitizing a receivable"""

    title: str
    total_value: Decimal
    duration: str
    description: Optional[str] = None
    expected_return: Optional[Decimal] = None
    risk_grade: Optional[RiskGrade] = None


@dataclass
class PurchaseAmounts:
    """Money movements for one purchase"""

    total_value: Decimal
    commission: Decimal
    total_amount: Decimal  # what the investor pays
    merchant_proceeds: Decimal  # what the merchant is credited


@dataclass
class PaymentResult:
    """Outcome reported by the payment gateway"""

    transaction_id: str
    success: bool
    gateway_response: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PurchaseOutcome:
    """Result of a single-security purchase"""

    security: Any
    transaction: Any
    commission: Decimal
    total_amount: Decimal


@dataclass
class WatchlistPurchaseOutcome:
    """Result of a batch watchlist purchase"""

    purchased: List[Any]
    skipped_security_ids: List[str]
    # Per-item money movements; empty when the batch only moves statuses
    outcomes: List[PurchaseOutcome] = field(default_factory=list)
