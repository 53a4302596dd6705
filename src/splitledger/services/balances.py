from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Callable, Sequence

from splitledger.db.models import UNKNOWN_USER_NAME, GroupBalance, UserBalance
from splitledger.logging import get_logger
from splitledger.services.ledger import (
    expenses_of_group,
    find_user,
    groups_of_user,
    members_of_group,
    payments_of_group,
)
from splitledger.utils.money import round_money

if TYPE_CHECKING:
    from splitledger.db.repo import Ledger


log = get_logger(__name__)

GroupBalancesFn = Callable[[str], Sequence[UserBalance]]


def compute_group_balances(ledger: Ledger, group_id: str) -> list[UserBalance]:
    """
    Net position of every member of a group.

    The payer of an expense is credited the full amount and every participant
    is debited their share, so a payer who also participates nets
    ``amount - own_share``. A payment credits the sender and debits the
    receiver. Ids that show up in expenses or payments without a membership
    row still get an entry; the group total stays zero either way.
    """
    accumulator: dict[str, float] = {}
    for member in members_of_group(ledger, group_id):
        accumulator[member.id] = 0.0

    expenses = expenses_of_group(ledger, group_id)
    expense_ids = {expense.id for expense in expenses}
    shares_by_expense: dict[str, list[tuple[str, float]]] = {}
    for participant in ledger.expense_participants:
        if participant.expense_id in expense_ids:
            shares_by_expense.setdefault(participant.expense_id, []).append(
                (participant.user_id, participant.share)
            )

    for expense in expenses:
        accumulator[expense.paid_by] = accumulator.get(expense.paid_by, 0.0) + expense.amount
        for user_id, share in shares_by_expense.get(expense.id, []):
            accumulator[user_id] = accumulator.get(user_id, 0.0) - share

    payments = payments_of_group(ledger, group_id)
    for payment in payments:
        accumulator[payment.from_user] = accumulator.get(payment.from_user, 0.0) + payment.amount
        accumulator[payment.to_user] = accumulator.get(payment.to_user, 0.0) - payment.amount

    balances = [
        UserBalance(user_id=user_id, user_name=_user_name(ledger, user_id), amount=round_money(amount))
        for user_id, amount in accumulator.items()
    ]
    log.debug(
        "balances.computed",
        group_id=group_id,
        members=len(balances),
        expenses=len(expenses),
        payments=len(payments),
    )
    return balances


def compute_all_group_balances(ledger: Ledger) -> list[GroupBalance]:
    return [
        GroupBalance(group_id=group.id, balances=compute_group_balances(ledger, group.id))
        for group in ledger.groups
    ]


def total_owed_to_user(ledger: Ledger, user_id: str, group_balances: GroupBalancesFn | None = None) -> float:
    total = sum(amount for amount in _user_amounts(ledger, user_id, group_balances) if amount > 0)
    return round_money(total)


def total_user_owes(ledger: Ledger, user_id: str, group_balances: GroupBalancesFn | None = None) -> float:
    total = sum(-amount for amount in _user_amounts(ledger, user_id, group_balances) if amount < 0)
    return round_money(total)


def user_net_balance(ledger: Ledger, user_id: str, group_balances: GroupBalancesFn | None = None) -> float:
    return round_money(sum(_user_amounts(ledger, user_id, group_balances)))


def _user_amounts(ledger: Ledger, user_id: str, group_balances: GroupBalancesFn | None) -> list[float]:
    if group_balances is None:
        group_balances = partial(compute_group_balances, ledger)

    amounts: list[float] = []
    for group_id in groups_of_user(ledger, user_id):
        for balance in group_balances(group_id):
            if balance.user_id == user_id:
                amounts.append(balance.amount)
                break
    return amounts


def _user_name(ledger: Ledger, user_id: str) -> str:
    user = find_user(ledger, user_id)
    return user.name if user else UNKNOWN_USER_NAME
