import pytest

from splitledger.cache import BalanceCache
from splitledger.config import Settings
from splitledger.db.models import Group, SuggestedPayment
from splitledger.db.repo import InMemoryLedgerRepository, Ledger
from splitledger.engine import BalanceEngine

from factories import USERS, expense, make_ledger, payment


class StaticSource:
    def __init__(self, ledger: Ledger) -> None:
        self.ledger = ledger
        self.calls = 0

    def snapshot(self) -> Ledger:
        self.calls += 1
        return self.ledger


class FrozenClock:
    def __call__(self) -> float:
        return 0.0


def _settings() -> Settings:
    return Settings(CACHE_TTL_SECONDS=60.0)


def _repo() -> InMemoryLedgerRepository:
    repo = InMemoryLedgerRepository()
    for user in USERS[:3]:
        repo.add_user(user)
    repo.add_group(Group(id="g1", name="Trip", description="", created_by="a", date="2024-05-10"))
    repo.add_member("b", "g1")
    repo.add_member("c", "g1")
    return repo


def test_engine_scenarios_end_to_end():
    repo = _repo()
    engine = BalanceEngine(repo, cache=BalanceCache(ttl=60.0, clock=FrozenClock()), settings=_settings())

    assert engine.suggest_settlements("g1") == []

    e, parts = expense("e1", "a", 90.0, {"a": 30.0, "b": 30.0, "c": 30.0})
    repo.add_expense(e, parts)
    assert {b.user_id: b.amount for b in engine.compute_group_balances("g1")} == {"a": 60.0, "b": -30.0, "c": -30.0}

    repo.add_payment(payment("p1", "b", "a", 30.0))
    assert {b.user_id: b.amount for b in engine.compute_group_balances("g1")} == {"a": 30.0, "b": 0.0, "c": -30.0}
    assert engine.suggest_settlements("g1") == [
        SuggestedPayment(from_user="c", from_name="Carol", to_user="a", to_name="Alice", amount=30.0)
    ]


def test_engine_accessors():
    repo = _repo()
    e, parts = expense("e1", "a", 90.0, {"a": 30.0, "b": 30.0, "c": 30.0})
    repo.add_expense(e, parts)
    repo.add_payment(payment("p1", "b", "a", 30.0))
    engine = BalanceEngine(repo, settings=_settings())

    assert [u.id for u in engine.members_of_group("g1")] == ["a", "b", "c"]
    assert [x.id for x in engine.expenses_of_group("g1")] == ["e1"]
    assert len(engine.participants_of_expense("e1")) == 3
    assert [p.id for p in engine.payments_of_group("g1")] == ["p1"]


def test_cached_within_window_for_static_source(dinner_ledger):
    source = StaticSource(dinner_ledger)
    engine = BalanceEngine(source, cache=BalanceCache(ttl=60.0, clock=FrozenClock()), settings=_settings())

    first = engine.compute_group_balances("g1")
    engine.compute_group_balances("g1")
    assert len(engine.cache) == 1

    source.ledger = make_ledger()
    # same version, still within the window
    assert engine.compute_group_balances("g1") == first

    engine.invalidate()
    assert all(b.amount == 0 for b in engine.compute_group_balances("g1"))


def test_repository_writes_invalidate_cache():
    repo = _repo()
    engine = BalanceEngine(repo, cache=BalanceCache(ttl=60.0, clock=FrozenClock()), settings=_settings())

    assert engine.user_net_balance("a") == 0
    e, parts = expense("e1", "a", 50.0, {"a": 0.0, "b": 25.0, "c": 25.0})
    repo.add_expense(e, parts)

    assert engine.user_net_balance("a") == 50.0
    assert engine.total_owed_to_user("a") == 50.0
    assert engine.total_user_owes("b") == 25.0


def test_cross_group_aggregation():
    repo = _repo()
    repo.add_group(Group(id="g2", name="Flat", description="", created_by="b", date="2024-05-12"))
    repo.add_member("a", "g2")
    e1, p1 = expense("e1", "a", 90.0, {"a": 30.0, "b": 30.0, "c": 30.0}, group_id="g1")
    e2, p2 = expense("e2", "b", 40.0, {"a": 20.0, "b": 20.0}, group_id="g2")
    repo.add_expense(e1, p1)
    repo.add_expense(e2, p2)
    engine = BalanceEngine(repo, settings=_settings())

    assert engine.total_owed_to_user("a") == 60.0
    assert engine.total_user_owes("a") == 20.0
    assert engine.user_net_balance("a") == pytest.approx(
        engine.total_owed_to_user("a") - engine.total_user_owes("a")
    )
    assert [g.group_id for g in engine.compute_all_group_balances()] == ["g1", "g2"]


def test_detailed_balances_through_engine(dinner_ledger):
    engine = BalanceEngine(StaticSource(dinner_ledger), settings=_settings())
    details = engine.detailed_balances("g1")

    assert [(d.from_user, d.to_user, d.amount) for d in details] == [("b", "a", 30.0), ("c", "a", 30.0)]


def test_returned_lists_are_copies(dinner_ledger):
    engine = BalanceEngine(StaticSource(dinner_ledger), settings=_settings())
    engine.compute_group_balances("g1").clear()

    assert len(engine.compute_group_balances("g1")) == 3


def test_unknown_user_is_zero(dinner_ledger):
    engine = BalanceEngine(StaticSource(dinner_ledger), settings=_settings())
    assert engine.user_net_balance("ghost") == 0
    assert engine.total_owed_to_user("ghost") == 0
    assert engine.total_user_owes("ghost") == 0
    assert engine.members_of_group("ghost") == []
