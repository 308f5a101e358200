"""Tests for drag-and-drop stage resolution (resolver.py)"""
import pytest

from pkg.placement.resolver import CardTarget, ColumnTarget, StageResolver, Unresolved
from pkg.placement.schema import Application, Stage
from pkg.placement.store import ApplicationStore


@pytest.fixture
def store():
    store = ApplicationStore()
    store.create({"company": "Google", "role": "SWE", "package": "45", "status": "applied"})
    store.create({"company": "Microsoft", "role": "SDE-1", "package": "38", "status": "round1"})
    store.create({"company": "Netflix", "role": "FS", "package": "48", "status": "hr-round"})
    return store


@pytest.fixture
def resolver(store):
    return StageResolver(store)


def by_company(store, name):
    return next(a for a in store.all() if a.company == name)


class TestClassify:
    """Column ids, card ids and everything else."""

    def test_stage_id_is_column(self, resolver):
        assert resolver.classify("round2") == ColumnTarget(Stage.ROUND2)
        assert resolver.classify("hr-round") == ColumnTarget(Stage.HR_ROUND)

    def test_application_id_is_card(self, resolver, store):
        netflix = by_company(store, "Netflix")
        assert resolver.classify(netflix.id) == CardTarget(netflix.id, Stage.HR_ROUND)

    def test_unknown_id_is_unresolved(self, resolver):
        assert resolver.classify("column-header") == Unresolved("column-header")
        assert resolver.classify(None) == Unresolved(None)

    def test_column_wins_over_card_with_same_id(self):
        clash = Application(id="round3", company="Odd", role="R", package="P", status=Stage.PLACED)
        resolver = StageResolver(ApplicationStore([clash]))
        assert resolver.classify("round3") == ColumnTarget(Stage.ROUND3)


class TestResolve:
    """Target stage computation, without applying anything."""

    def test_column_drop_regardless_of_current_stage(self, resolver, store):
        google = by_company(store, "Google")
        for stage in Stage:
            expected = None if stage == Stage.APPLIED else stage
            assert resolver.resolve(google.id, stage.value) == expected

    def test_card_drop_takes_card_stage(self, resolver, store):
        google = by_company(store, "Google")
        microsoft = by_company(store, "Microsoft")
        assert resolver.resolve(google.id, microsoft.id) == Stage.ROUND1

    def test_card_drop_in_same_column_is_no_move(self, resolver, store):
        google = by_company(store, "Google")
        other = store.create({"company": "Zomato", "role": "BE", "package": "28"})
        assert resolver.resolve(google.id, other.id) is None

    def test_unknown_over_is_no_move(self, resolver, store):
        google = by_company(store, "Google")
        assert resolver.resolve(google.id, "drag-overlay") is None
        assert resolver.resolve(google.id, None) is None

    def test_unknown_active_is_no_move(self, resolver):
        assert resolver.resolve("ghost", "placed") is None


class TestDragLifecycle:

    def test_drag_end_moves_and_clears_active(self, resolver, store):
        google = by_company(store, "Google")
        assert resolver.drag_start(google.id) == google
        assert resolver.active == google

        moved = resolver.drag_end(google.id, "round3")
        assert moved.status == Stage.ROUND3
        assert store.get(google.id).status == Stage.ROUND3
        assert resolver.active is None

    def test_drag_end_on_card_joins_its_column(self, resolver, store):
        google = by_company(store, "Google")
        netflix = by_company(store, "Netflix")
        resolver.drag_end(google.id, netflix.id)
        assert [a.company for a in store.list_by_stage("hr-round")] == ["Google", "Netflix"]

    def test_drag_end_without_move_changes_nothing(self, resolver, store):
        events = []
        store.subscribe(lambda event, app: events.append(event))
        google = by_company(store, "Google")
        resolver.drag_start(google.id)

        assert resolver.drag_end(google.id, "applied") is None
        assert resolver.drag_end(google.id, "toolbar") is None
        assert resolver.drag_end("ghost", "placed") is None
        assert events == []
        assert resolver.active is None

    def test_drag_cancel(self, resolver, store):
        resolver.drag_start(by_company(store, "Google").id)
        resolver.drag_cancel()
        assert resolver.active is None
