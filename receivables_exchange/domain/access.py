"""Role and ownership checks applied by the workflows"""

from receivables_exchange.domain.exceptions import ForbiddenError
from receivables_exchange.domain.models import Principal, Role


def require_role(principal: Principal, role: Role, message: str) -> None:
    if Role(principal.role) is not role:
        raise ForbiddenError(message)


def require_owner(principal: Principal, owner_id: str, kind: str) -> None:
    if principal.user_id != owner_id:
        raise ForbiddenError(f"{kind.capitalize()} belongs to another merchant")
