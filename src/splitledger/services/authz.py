from __future__ import annotations

from typing import TYPE_CHECKING

from splitledger.errors import MembershipError

if TYPE_CHECKING:
    from splitledger.db.repo import Ledger


def is_group_member(ledger: Ledger, user_id: str, group_id: str) -> bool:
    return any(m.user_id == user_id and m.group_id == group_id for m in ledger.group_members)


def is_group_creator(ledger: Ledger, user_id: str, group_id: str) -> bool:
    return any(g.id == group_id and g.created_by == user_id for g in ledger.groups)


def assert_group_member(ledger: Ledger, user_id: str, group_id: str) -> None:
    if not is_group_member(ledger, user_id, group_id):
        raise MembershipError(f"User {user_id} is not a member of group {group_id}.")
