from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional, Sequence

from splitledger.config import get_settings
from splitledger.db.models import Payment
from splitledger.errors import LedgerValidationError
from splitledger.services.authz import is_group_member
from splitledger.utils.money import parse_amount, round_money

if TYPE_CHECKING:
    from splitledger.db.repo import Ledger


Share = tuple[str, float]


def calculate_equal_shares(member_ids: Sequence[str], amount: float) -> list[Share]:
    if not member_ids:
        return []

    equal_share = round_money(amount / len(member_ids))
    shares = [(member_id, equal_share) for member_id in member_ids]

    # the first participant absorbs the rounding residue
    diff = amount - sum(share for _, share in shares)
    if abs(diff) >= 0.005:
        first_id, first_share = shares[0]
        shares[0] = (first_id, round_money(first_share + diff))

    return shares


def validate_expense(
    description: str,
    amount: float | str | None,
    group_id: Optional[str],
    paid_by: Optional[str],
    shares: Sequence[Share],
    tolerance: float | None = None,
    ledger: Ledger | None = None,
) -> dict[str, str]:
    if tolerance is None:
        tolerance = get_settings().share_tolerance

    errors: dict[str, str] = {}

    if not description or not description.strip():
        errors["description"] = "Description is required"

    amount_value: float | None = None
    if isinstance(amount, str):
        try:
            amount_value = parse_amount(amount)
        except ValueError:
            amount_value = None
    elif amount is not None:
        amount_value = float(amount)
    if amount_value is None or not _is_positive(amount_value):
        errors["amount"] = "Please enter a valid amount"
        amount_value = None

    if not group_id:
        errors["group"] = "Please select a group"

    if not paid_by:
        errors["paidBy"] = "Paid by is required"
    elif ledger is not None and group_id and not is_group_member(ledger, paid_by, group_id):
        errors["paidBy"] = "Payer is not a member of this group"

    if any(not math.isfinite(share) for _, share in shares):
        errors["shares"] = "Please enter a valid share"
        return errors

    if any(share < 0 for _, share in shares):
        errors["shares"] = "Shares cannot be negative"
        return errors

    if ledger is not None and group_id:
        outsiders = [user_id for user_id, _ in shares if not is_group_member(ledger, user_id, group_id)]
        if outsiders:
            errors["shares"] = f"Not members of this group: {', '.join(outsiders)}"
            return errors

    total_shares = sum(share for _, share in shares)
    if total_shares <= 0:
        errors["shares"] = "At least one person must share the expense"
    elif amount_value is not None and abs(total_shares - amount_value) > tolerance:
        errors["shares"] = (
            f"Total shares (${total_shares:.2f}) don't match expense amount (${amount_value:.2f})"
        )

    return errors


def assert_valid_expense(
    description: str,
    amount: float | str | None,
    group_id: Optional[str],
    paid_by: Optional[str],
    shares: Sequence[Share],
    tolerance: float | None = None,
    ledger: Ledger | None = None,
) -> None:
    errors = validate_expense(description, amount, group_id, paid_by, shares, tolerance, ledger)
    if errors:
        raise LedgerValidationError(errors)


def validate_payment(ledger: Ledger, payment: Payment) -> dict[str, str]:
    errors: dict[str, str] = {}

    if not _is_positive(payment.amount):
        errors["amount"] = "Please enter a valid amount"

    if payment.from_user == payment.to_user:
        errors["toUser"] = "Payer and recipient must be different"

    if not is_group_member(ledger, payment.from_user, payment.group_id):
        errors["fromUser"] = "Payer is not a member of this group"
    if "toUser" not in errors and not is_group_member(ledger, payment.to_user, payment.group_id):
        errors["toUser"] = "Recipient is not a member of this group"

    return errors


def assert_valid_payment(ledger: Ledger, payment: Payment) -> None:
    errors = validate_payment(ledger, payment)
    if errors:
        raise LedgerValidationError(errors)


def _is_positive(value: float) -> bool:
    return math.isfinite(value) and value > 0
