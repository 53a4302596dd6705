from __future__ import annotations

from typing import Optional

from splitledger.cache import BalanceCache
from splitledger.config import Settings, get_settings
from splitledger.db.models import (
    DebtDetail,
    Expense,
    ExpenseParticipant,
    GroupBalance,
    Payment,
    SuggestedPayment,
    User,
    UserBalance,
)
from splitledger.db.repo import Ledger, LedgerSource
from splitledger.logging import get_logger
from splitledger.services import balances, ledger, settlement


class BalanceEngine:
    """Read-side entry point over a ledger source with memoized balances."""

    def __init__(
        self,
        source: LedgerSource,
        cache: Optional[BalanceCache] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._source = source
        self._cache = cache or BalanceCache(ttl=self._settings.cache_ttl_seconds)
        self._log = get_logger(__name__)

        subscribe = getattr(source, "subscribe", None)
        if callable(subscribe):
            subscribe(self._cache.invalidate)

    @property
    def cache(self) -> BalanceCache:
        return self._cache

    def invalidate(self) -> None:
        self._cache.invalidate()

    def expenses_of_group(self, group_id: str) -> list[Expense]:
        return ledger.expenses_of_group(self._snapshot(), group_id)

    def members_of_group(self, group_id: str) -> list[User]:
        return ledger.members_of_group(self._snapshot(), group_id)

    def participants_of_expense(self, expense_id: str) -> list[ExpenseParticipant]:
        return ledger.participants_of_expense(self._snapshot(), expense_id)

    def payments_of_group(self, group_id: str) -> list[Payment]:
        return ledger.payments_of_group(self._snapshot(), group_id)

    def compute_group_balances(self, group_id: str) -> list[UserBalance]:
        return list(self._group_balances(self._snapshot(), group_id))

    def compute_all_group_balances(self) -> list[GroupBalance]:
        snapshot = self._snapshot()
        return [
            GroupBalance(group_id=group.id, balances=list(self._group_balances(snapshot, group.id)))
            for group in snapshot.groups
        ]

    def total_owed_to_user(self, user_id: str) -> float:
        snapshot = self._snapshot()
        return balances.total_owed_to_user(snapshot, user_id, self._balances_fn(snapshot))

    def total_user_owes(self, user_id: str) -> float:
        snapshot = self._snapshot()
        return balances.total_user_owes(snapshot, user_id, self._balances_fn(snapshot))

    def user_net_balance(self, user_id: str) -> float:
        snapshot = self._snapshot()
        return self._cache.get_or_compute(
            ("user", user_id),
            snapshot.version,
            lambda: balances.user_net_balance(snapshot, user_id, self._balances_fn(snapshot)),
        )

    def suggest_settlements(self, group_id: str) -> list[SuggestedPayment]:
        snapshot = self._snapshot()
        suggestions = settlement.suggest_settlements(
            self._group_balances(snapshot, group_id),
            epsilon=self._settings.settlement_epsilon,
        )
        self._log.debug("settlement.suggested", group_id=group_id, transfers=len(suggestions))
        return suggestions

    def detailed_balances(self, group_id: str) -> list[DebtDetail]:
        snapshot = self._snapshot()
        return settlement.detailed_balances(
            self._group_balances(snapshot, group_id),
            epsilon=self._settings.settlement_epsilon,
        )

    def _snapshot(self) -> Ledger:
        return self._source.snapshot()

    def _group_balances(self, snapshot: Ledger, group_id: str) -> list[UserBalance]:
        return self._cache.get_or_compute(
            ("group", group_id),
            snapshot.version,
            lambda: balances.compute_group_balances(snapshot, group_id),
        )

    def _balances_fn(self, snapshot: Ledger) -> balances.GroupBalancesFn:
        return lambda group_id: self._group_balances(snapshot, group_id)
