from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from splitledger.db.models import Expense, ExpenseParticipant, Payment, User

if TYPE_CHECKING:
    from splitledger.db.repo import Ledger


def find_user(ledger: Ledger, user_id: str) -> Optional[User]:
    for user in ledger.users:
        if user.id == user_id:
            return user
    return None


def expenses_of_group(ledger: Ledger, group_id: str) -> list[Expense]:
    return [expense for expense in ledger.expenses if expense.group_id == group_id]


def members_of_group(ledger: Ledger, group_id: str) -> list[User]:
    member_ids = {member.user_id for member in ledger.group_members if member.group_id == group_id}
    return [user for user in ledger.users if user.id in member_ids]


def participants_of_expense(ledger: Ledger, expense_id: str) -> list[ExpenseParticipant]:
    return [participant for participant in ledger.expense_participants if participant.expense_id == expense_id]


def payments_of_group(ledger: Ledger, group_id: str) -> list[Payment]:
    return [payment for payment in ledger.payments if payment.group_id == group_id]


def groups_of_user(ledger: Ledger, user_id: str) -> list[str]:
    group_ids = {member.group_id for member in ledger.group_members if member.user_id == user_id}
    return [group.id for group in ledger.groups if group.id in group_ids]
