"""Investor watchlist management"""

from typing import List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from receivables_exchange.domain.access import require_role
from receivables_exchange.domain.exceptions import NotFoundError, SecurityNotAvailableError
from receivables_exchange.domain.models import Principal, Role, SecurityStatus
from receivables_exchange.infrastructure.database.models import WatchlistEntry
from receivables_exchange.infrastructure.database.repositories import SecurityRepository, WatchlistRepository
from receivables_exchange.infrastructure.database.session import transaction


class WatchlistService:
    def __init__(self, db: Session):
        self.db = db
        self.watchlist = WatchlistRepository(db)
        self.securities = SecurityRepository(db)

    def current(self, principal: Principal) -> List[WatchlistEntry]:
        """Entries whose security is still listed"""
        return self.watchlist.get_current(principal.user_id)

    def add(self, principal: Principal, security_id: str) -> WatchlistEntry:
        """Idempotent: adding a security twice returns the existing entry"""
        require_role(principal, Role.INVESTOR, "Only investors can keep a watchlist")

        security = self.securities.get(security_id)
        if security is None:
            raise NotFoundError("Security not found")
        if security.status != SecurityStatus.LISTED.value:
            raise SecurityNotAvailableError("Only listed securities can be watched")

        existing = self.watchlist.find(principal.user_id, security_id)
        if existing is not None:
            return existing

        try:
            with transaction(self.db):
                return self.watchlist.add_entry(principal.user_id, security_id)
        except IntegrityError:
            # Concurrent add of the same pair won the unique constraint
            return self.watchlist.find(principal.user_id, security_id)

    def remove(self, principal: Principal, security_id: str) -> None:
        with transaction(self.db):
            self.watchlist.remove(principal.user_id, security_id)

    def clear(self, principal: Principal) -> int:
        with transaction(self.db):
            return self.watchlist.clear(principal.user_id)
