import pytest

from splitledger.db.repo import Ledger

from factories import expense, make_ledger


@pytest.fixture
def dinner_ledger() -> Ledger:
    e, parts = expense("e1", "a", 90.0, {"a": 30.0, "b": 30.0, "c": 30.0})
    return make_ledger(expenses=[e], participants=parts)
