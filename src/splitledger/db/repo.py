from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol

from splitledger.db.models import Expense, ExpenseParticipant, Group, GroupMember, Payment, User
from splitledger.errors import MembershipError
from splitledger.logging import get_logger
from splitledger.services.authz import is_group_creator
from splitledger.services.split import assert_valid_expense, assert_valid_payment


@dataclass(frozen=True, slots=True)
class Ledger:
    """Complete, immutable view of every collection the calculator reads."""

    users: tuple[User, ...] = ()
    groups: tuple[Group, ...] = ()
    group_members: tuple[GroupMember, ...] = ()
    expenses: tuple[Expense, ...] = ()
    expense_participants: tuple[ExpenseParticipant, ...] = ()
    payments: tuple[Payment, ...] = ()
    version: int = 0


class LedgerSource(Protocol):
    def snapshot(self) -> Ledger: ...


Listener = Callable[[int], None]


@dataclass(slots=True)
class _Tables:
    users: list[User] = field(default_factory=list)
    groups: list[Group] = field(default_factory=list)
    group_members: list[GroupMember] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    expense_participants: list[ExpenseParticipant] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)


class InMemoryLedgerRepository:
    def __init__(self, ledger: Ledger | None = None, validate: bool = False) -> None:
        ledger = ledger or Ledger()
        self._tables = _Tables(
            users=list(ledger.users),
            groups=list(ledger.groups),
            group_members=list(ledger.group_members),
            expenses=list(ledger.expenses),
            expense_participants=list(ledger.expense_participants),
            payments=list(ledger.payments),
        )
        self._version = ledger.version
        self._snapshot: Ledger | None = None
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()
        self._validate = validate
        self._log = get_logger(__name__)

    @property
    def version(self) -> int:
        return self._version

    def snapshot(self) -> Ledger:
        with self._lock:
            if self._snapshot is None:
                t = self._tables
                self._snapshot = Ledger(
                    users=tuple(t.users),
                    groups=tuple(t.groups),
                    group_members=tuple(t.group_members),
                    expenses=tuple(t.expenses),
                    expense_participants=tuple(t.expense_participants),
                    payments=tuple(t.payments),
                    version=self._version,
                )
            return self._snapshot

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def add_user(self, user: User) -> User:
        with self._lock:
            self._tables.users.append(user)
            self._bump()
        self._log.info("ledger.user.added", user_id=user.id)
        self._notify()
        return user

    def add_group(self, group: Group) -> Group:
        with self._lock:
            self._tables.groups.append(group)
            # the creator is always a member of their group
            if GroupMember(group.created_by, group.id) not in self._tables.group_members:
                self._tables.group_members.append(GroupMember(group.created_by, group.id))
            self._bump()
        self._log.info("ledger.group.added", group_id=group.id, created_by=group.created_by)
        self._notify()
        return group

    def add_member(self, user_id: str, group_id: str) -> GroupMember:
        member = GroupMember(user_id=user_id, group_id=group_id)
        with self._lock:
            if member in self._tables.group_members:
                return member
            self._tables.group_members.append(member)
            self._bump()
        self._log.info("ledger.member.added", user_id=user_id, group_id=group_id)
        self._notify()
        return member

    def remove_member(self, user_id: str, group_id: str) -> None:
        if is_group_creator(self.snapshot(), user_id, group_id):
            raise MembershipError("The group creator cannot leave the group.")

        member = GroupMember(user_id=user_id, group_id=group_id)
        with self._lock:
            if member not in self._tables.group_members:
                return
            self._tables.group_members.remove(member)
            self._bump()
        self._log.info("ledger.member.removed", user_id=user_id, group_id=group_id)
        self._notify()

    def add_expense(self, expense: Expense, participants: Iterable[ExpenseParticipant]) -> Expense:
        participants = list(participants)
        if self._validate:
            assert_valid_expense(
                description=expense.description,
                amount=expense.amount,
                group_id=expense.group_id,
                paid_by=expense.paid_by,
                shares=[(p.user_id, p.share) for p in participants],
                ledger=self.snapshot(),
            )
        with self._lock:
            self._tables.expenses.append(expense)
            self._tables.expense_participants.extend(participants)
            self._bump()
        self._log.info(
            "ledger.expense.added",
            expense_id=expense.id,
            group_id=expense.group_id,
            amount=expense.amount,
            participants=len(participants),
        )
        self._notify()
        return expense

    def remove_expense(self, expense_id: str) -> None:
        with self._lock:
            t = self._tables
            before = len(t.expenses)
            t.expenses = [e for e in t.expenses if e.id != expense_id]
            if len(t.expenses) == before:
                return
            t.expense_participants = [p for p in t.expense_participants if p.expense_id != expense_id]
            self._bump()
        self._log.info("ledger.expense.removed", expense_id=expense_id)
        self._notify()

    def add_payment(self, payment: Payment) -> Payment:
        if self._validate:
            assert_valid_payment(self.snapshot(), payment)
        with self._lock:
            self._tables.payments.append(payment)
            self._bump()
        self._log.info(
            "ledger.payment.added",
            payment_id=payment.id,
            group_id=payment.group_id,
            from_user=payment.from_user,
            to_user=payment.to_user,
            amount=payment.amount,
        )
        self._notify()
        return payment

    def remove_payment(self, payment_id: str) -> None:
        with self._lock:
            before = len(self._tables.payments)
            self._tables.payments = [p for p in self._tables.payments if p.id != payment_id]
            if len(self._tables.payments) == before:
                return
            self._bump()
        self._log.info("ledger.payment.removed", payment_id=payment_id)
        self._notify()

    def _bump(self) -> None:
        self._version += 1
        self._snapshot = None

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._version)
