from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


UNKNOWN_USER_NAME = "Unknown User"


@dataclass(frozen=True, slots=True)
class User:
    id: str
    name: str
    email: str
    avatar: str = ""


@dataclass(frozen=True, slots=True)
class Group:
    id: str
    name: str
    description: str
    created_by: str
    date: str


@dataclass(frozen=True, slots=True)
class GroupMember:
    user_id: str
    group_id: str


@dataclass(frozen=True, slots=True)
class Expense:
    id: str
    group_id: str
    description: str
    amount: float
    paid_by: str
    date: str


@dataclass(frozen=True, slots=True)
class ExpenseParticipant:
    expense_id: str
    user_id: str
    share: float


@dataclass(frozen=True, slots=True)
class Payment:
    id: str
    from_user: str
    to_user: str
    amount: float
    date: str
    group_id: str
    payment_method: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True, slots=True)
class UserBalance:
    user_id: str
    user_name: str
    amount: float


@dataclass(frozen=True, slots=True)
class GroupBalance:
    group_id: str
    balances: list[UserBalance]


@dataclass(frozen=True, slots=True)
class SuggestedPayment:
    from_user: str
    from_name: str
    to_user: str
    to_name: str
    amount: float


@dataclass(frozen=True, slots=True)
class DebtDetail:
    from_user: str
    from_name: str
    to_user: str
    to_name: str
    amount: float
