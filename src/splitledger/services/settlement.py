from __future__ import annotations

from typing import Iterable, List

from splitledger.db.models import DebtDetail, SuggestedPayment, UserBalance
from splitledger.utils.money import is_zero, round_money


SETTLEMENT_EPSILON = 0.01


def suggest_settlements(balances: Iterable[UserBalance], epsilon: float = SETTLEMENT_EPSILON) -> List[SuggestedPayment]:
    """
    Greedy two-pointer matching of the largest creditor against the largest
    debtor. Every step drives at least one side to zero, so a group with n
    non-zero members needs at most n - 1 transfers.
    """
    creditors: list[list] = []
    debtors: list[list] = []

    for balance in balances:
        if balance.amount > 0:
            creditors.append([balance.user_id, balance.user_name, balance.amount])
        elif balance.amount < 0:
            debtors.append([balance.user_id, balance.user_name, balance.amount])

    creditors.sort(key=lambda x: x[2], reverse=True)
    debtors.sort(key=lambda x: x[2])

    payments: list[SuggestedPayment] = []
    i, j = 0, 0

    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]

        amount = min(creditor[2], -debtor[2])
        if amount > epsilon:
            payments.append(
                SuggestedPayment(
                    from_user=debtor[0],
                    from_name=debtor[1],
                    to_user=creditor[0],
                    to_name=creditor[1],
                    amount=round_money(amount),
                )
            )

        creditor[2] -= amount
        debtor[2] += amount

        creditor_done = is_zero(creditor[2], epsilon)
        debtor_done = is_zero(debtor[2], epsilon)
        if creditor_done:
            i += 1
        if debtor_done:
            j += 1

    return payments


def detailed_balances(balances: Iterable[UserBalance], epsilon: float = SETTLEMENT_EPSILON) -> List[DebtDetail]:
    """Spread every debtor's debt over all creditors in proportion to what each is owed."""
    balances = list(balances)
    creditors = [b for b in balances if b.amount > 0]
    debtors = [b for b in balances if b.amount < 0]
    total_credit = sum(b.amount for b in creditors)

    details: list[DebtDetail] = []
    if total_credit <= 0:
        return details

    for creditor in creditors:
        proportion = creditor.amount / total_credit
        for debtor in debtors:
            amount = abs(debtor.amount) * proportion
            if amount > epsilon:
                details.append(
                    DebtDetail(
                        from_user=debtor.user_id,
                        from_name=debtor.user_name,
                        to_user=creditor.user_id,
                        to_name=creditor.user_name,
                        amount=round_money(amount),
                    )
                )
    return details
