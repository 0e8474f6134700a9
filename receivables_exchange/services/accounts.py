"""User registration, principal resolution and profile management"""

from typing import Any, Dict, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from receivables_exchange.domain.exceptions import (
    ConflictError,
    PreconditionFailedError,
    UnauthorizedError,
    ValidationError,
)
from receivables_exchange.domain.models import Principal, Role
from receivables_exchange.infrastructure.database.models import User
from receivables_exchange.infrastructure.database.repositories import UserRepository
from receivables_exchange.infrastructure.database.session import transaction

PROFILE_FIELDS = ("first_name", "last_name", "phone_number", "address")


class AccountService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)

    def register(
        self,
        user_id: str,
        role: Role,
        email: Optional[str] = None,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> User:
        """Create the user with a role; the role can be chosen exactly once"""
        try:
            with transaction(self.db):
                existing = self.users.get(user_id)
                if existing is not None and existing.role:
                    raise PreconditionFailedError("User already has a role assigned")

                if existing is None:
                    return self.users.create_user(
                        user_id=user_id,
                        role=Role(role).value,
                        email=email,
                        first_name=first_name,
                        last_name=last_name,
                    )

                # Row provisioned by the identity provider without a role yet
                return self.users.update_profile(
                    existing,
                    {
                        "role": Role(role).value,
                        "email": email or existing.email,
                        "first_name": first_name or existing.first_name,
                        "last_name": last_name or existing.last_name,
                    },
                )
        except IntegrityError as e:
            # users.email is unique
            raise ConflictError("Email already registered") from e

    def resolve_principal(self, user_id: Optional[str]) -> Principal:
        """Map the identity provider's user id to a registered principal"""
        if not user_id:
            raise UnauthorizedError("Authentication required")
        user = self.users.get(user_id)
        if user is None or not user.role:
            raise UnauthorizedError("User is not registered")
        return Principal(user_id=user.id, role=Role(user.role))

    def get_user(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise UnauthorizedError("User is not registered")
        return user

    def update_profile(self, user_id: str, fields: Dict[str, Any]) -> User:
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        with transaction(self.db):
            return self.users.update_profile(self.get_user(user_id), fields)
