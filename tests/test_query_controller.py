"""
Query handling.

Covers:
  - Initial load of every result set and panel state
  - Debounce: one pending evaluation, latest query wins
  - Default asyncio scheduler needs a running loop or an explicit one
  - Incremental narrowing vs full rescans of the data store
  - Sub-techniques without a parent stay searchable
  - Field toggles rescan with the live query
  - Data component labels and their techniques
  - Snapshots and missing domain versions
"""

import asyncio
import locale
from unittest.mock import Mock

import pytest

from navigator_search.config import SearchSettings
from navigator_search.exceptions import NotFoundError, ValidationError
from navigator_search.scheduling import AsyncioScheduler
from navigator_search.search import SearchAndMultiselect
from navigator_search.repositories import InMemoryDataStore
from navigator_search.services import QueryController, QueryState, RelationshipResolver
from navigator_search.view_model import TechniqueViewModel

from factories import DOMAIN_VERSION, ManualScheduler, names, technique

PHISH_TECHNIQUES = ["Phishing", "Spearphishing Attachment", "Spearphishing Link"]


def group_names(controller):
    return {group.label: names(group.objects) for group in controller.result_groups}


# ============================================================================
# 1. Initial load
# ============================================================================

class TestLoad:
    def test_techniques_sorted_with_hierarchy(self, controller):
        assert names(controller.technique_results) == [
            "Command and Scripting Interpreter",
            "PowerShell",
            "Drive-by Compromise",
            "Phishing",
            "Spearphishing Attachment",
            "Spearphishing Link",
        ]

    def test_result_groups_in_panel_order(self, controller):
        assert [g.label for g in controller.result_groups] == [
            "threat groups", "software", "campaigns", "mitigations"
        ]
        assert group_names(controller) == {
            "threat groups": ["APT28", "APT29"],
            "software": ["Cobalt Strike", "Mimikatz"],
            "campaigns": ["Operation Dream Job"],
            "mitigations": ["User Training"],
        }

    def test_data_component_labels(self, controller):
        assert controller.data_component_labels == [
            "Network Traffic: Network Traffic Content",
            "Process: Process Creation",
        ]

    def test_panels(self, controller):
        assert controller.panels.expanded == [True, False, False, False, False, False]

    def test_missing_domain_version(self, store, scheduler):
        controller = QueryController(store, TechniqueViewModel("mobile-attack-1"), scheduler=scheduler)
        with pytest.raises(NotFoundError):
            controller.load()

    def test_collation_locale_applied_on_construction(self, store, view_model, scheduler, monkeypatch):
        setlocale = Mock(return_value="C")
        monkeypatch.setattr(locale, "setlocale", setlocale)
        QueryController(store, view_model, settings=SearchSettings(collation_locale="C"), scheduler=scheduler)
        setlocale.assert_any_call(locale.LC_COLLATE, "C")


# ============================================================================
# 2. Debounce
# ============================================================================

class TestDebounce:
    def test_query_updates_immediately_but_evaluates_later(self, controller, scheduler):
        controller.query = "phish"
        assert controller.query == "phish"
        assert controller.query_length == 5
        assert controller.state == QueryState.DEBOUNCING
        assert len(controller.technique_results) == 6

        scheduler.advance(0.3)
        assert controller.state == QueryState.IDLE
        assert names(controller.technique_results) == PHISH_TECHNIQUES

    def test_single_timer_and_latest_query_wins(self, controller, scheduler):
        for text in ("p", "ph", "phi", "phish"):
            controller.query = text
        assert scheduler.scheduled == 1

        scheduler.advance(0.3)
        assert controller.previous_query == "phish"
        assert names(controller.technique_results) == PHISH_TECHNIQUES

    def test_not_evaluated_before_delay(self, controller, scheduler):
        controller.query = "phish"
        scheduler.advance(0.2)
        assert controller.state == QueryState.DEBOUNCING
        assert controller.previous_query == ""

    def test_timer_rearms_after_firing(self, controller, scheduler):
        controller.query = "phish"
        scheduler.advance(0.3)
        controller.query = "spear"
        assert scheduler.scheduled == 2
        scheduler.advance(0.3)
        assert names(controller.technique_results) == ["Spearphishing Attachment", "Spearphishing Link"]

    def test_asyncio_scheduler(self, store, view_model):
        settings = SearchSettings(debounce_seconds=0.01)

        async def type_query():
            controller = QueryController(store, view_model, settings=settings)
            controller.load()
            controller.query = "phish"
            assert controller.state == QueryState.DEBOUNCING
            await asyncio.sleep(0.05)
            return controller

        controller = asyncio.run(type_query())
        assert controller.state == QueryState.IDLE
        assert names(controller.technique_results) == PHISH_TECHNIQUES

    def test_default_scheduler_outside_event_loop(self, store, view_model):
        search = SearchAndMultiselect(store, view_model)
        search.load()

        with pytest.raises(ValidationError, match="running asyncio event loop"):
            search.query = "phish"
        assert search.state == QueryState.IDLE
        assert len(search.technique_results) == 6

    def test_explicit_loop_outside_coroutine(self, store, view_model):
        loop = asyncio.new_event_loop()
        try:
            settings = SearchSettings(debounce_seconds=0.01)
            controller = QueryController(store, view_model, settings=settings, scheduler=AsyncioScheduler(loop))
            controller.load()
            controller.query = "phish"
            assert controller.state == QueryState.DEBOUNCING

            loop.run_until_complete(asyncio.sleep(0.05))
            assert names(controller.technique_results) == PHISH_TECHNIQUES
        finally:
            loop.close()


# ============================================================================
# 3. Incremental vs full evaluation
# ============================================================================

class TestEvaluation:
    @pytest.fixture
    def spy_store(self, store):
        return Mock(wraps=store)

    @pytest.fixture
    def spied(self, spy_store, view_model, scheduler):
        controller = QueryController(spy_store, view_model, scheduler=scheduler)
        controller.load()
        return controller

    def test_load_reads_store_once(self, spied, spy_store):
        assert spy_store.get_domain.call_count == 1

    def test_extending_query_narrows_locally(self, spied, spy_store):
        spied.get_results("phish")
        spied.get_results("phishing messages")
        assert spy_store.get_domain.call_count == 1
        assert names(spied.technique_results) == ["Phishing"]

    def test_shortening_query_rescans(self, spied, spy_store):
        spied.get_results("phishing messages")
        spied.get_results("phish")
        assert spy_store.get_domain.call_count == 2
        assert names(spied.technique_results) == PHISH_TECHNIQUES

    def test_empty_query_rescans(self, spied, spy_store):
        spied.get_results("phish")
        spied.get_results("")
        assert spy_store.get_domain.call_count == 2
        assert len(spied.technique_results) == 6

    def test_whitespace_query_rescans(self, spied, spy_store):
        spied.get_results("   ")
        assert spy_store.get_domain.call_count == 2

    def test_phish_results(self, controller):
        controller.get_results("phish")
        assert names(controller.technique_results) == PHISH_TECHNIQUES
        assert group_names(controller) == {
            "threat groups": ["APT28"],
            "software": [],
            "campaigns": [],
            "mitigations": ["User Training"],
        }
        assert controller.data_component_labels == []
        assert controller.panels.expanded == [True, False, False, False, False, False]

    def test_incremental_result_equals_rescan(self, controller, store, view_model, scheduler):
        controller.get_results("ph")
        controller.get_results("phish")

        fresh = QueryController(store, view_model, scheduler=scheduler)
        fresh.load()
        fresh.get_results("no such technique")
        fresh.get_results("phish")
        assert names(controller.technique_results) == names(fresh.technique_results)
        assert group_names(controller) == group_names(fresh)

    def test_groups_only_query_expands_groups_panel(self, controller):
        controller.get_results("apt")
        assert controller.technique_results == []
        assert group_names(controller)["threat groups"] == ["APT28", "APT29"]
        assert controller.panels.expanded == [False, True, False, False, False, False]

    def test_previous_query_tracks_evaluated_query(self, controller):
        controller.get_results("phish")
        assert controller.previous_query == "phish"
        controller.get_results("")
        assert controller.previous_query == ""

    def test_subtechnique_without_parent_is_searchable(self, domain, view_model, scheduler):
        orphan = technique("orphan", "Orphaned Sub", "T1566.999", is_subtechnique=True)
        domain.subtechniques.append(orphan)
        apt29 = domain.groups[0]
        apt29.related_technique_ids[DOMAIN_VERSION].append(orphan.id)
        store = InMemoryDataStore([domain])

        controller = QueryController(store, view_model, scheduler=scheduler)
        controller.load()
        assert "Orphaned Sub" in names(controller.technique_results)

        controller.get_results("orphaned")
        assert names(controller.technique_results) == ["Orphaned Sub"]
        assert orphan in RelationshipResolver(store).get_related(apt29, DOMAIN_VERSION)


# ============================================================================
# 4. Search fields
# ============================================================================

class TestFields:
    def test_fields_are_copied_from_settings(self, controller):
        controller.toggle_field_enabled("name")
        assert all(field.enabled for field in controller.settings.search_fields)

    def test_toggle_rescans_with_live_query(self, controller, scheduler):
        controller.query = "phish"
        scheduler.advance(0.3)

        assert controller.toggle_field_enabled("name") is False
        assert names(controller.technique_results) == ["Phishing"]
        assert controller.previous_query == "phish"
        assert group_names(controller)["threat groups"] == ["APT28"]

        assert controller.toggle_field_enabled("name") is True
        assert names(controller.technique_results) == PHISH_TECHNIQUES

    def test_toggle_with_empty_query_rescans(self, store, view_model, scheduler):
        spy_store = Mock(wraps=store)
        controller = QueryController(spy_store, view_model, scheduler=scheduler)
        controller.load()
        controller.toggle_field_enabled("description")
        assert spy_store.get_domain.call_count == 2

    def test_unknown_field_is_ignored(self, controller):
        before = [f.model_copy() for f in controller.fields]
        assert controller.toggle_field_enabled("aliases") is None
        assert controller.fields == before


# ============================================================================
# 5. Data components
# ============================================================================

class TestDataComponents:
    def test_labels_filtered_by_query(self, controller):
        controller.get_results("process")
        assert controller.data_component_labels == ["Process: Process Creation"]
        assert names(controller.data_component_results) == [
            "Command and Scripting Interpreter", "PowerShell"
        ]

    def test_labels_refiltered_from_full_set(self, controller):
        controller.get_results("process")
        controller.get_results("")
        controller.get_results("traffic")
        assert controller.data_component_labels == ["Network Traffic: Network Traffic Content"]

    def test_data_components_panel_expands_alone(self, controller):
        controller.toggle_field_enabled("datasources")
        controller.get_results("traffic")
        assert controller.technique_results == []
        assert controller.panels.expanded == [False, False, False, False, False, True]
        assert names(controller.data_component_results) == ["Phishing"]

    def test_entries_carry_source_url(self, controller):
        entry = controller.data_components["Process: Process Creation"]
        assert entry.url == "https://example.org/DS0009"


# ============================================================================
# 6. Snapshot
# ============================================================================

def test_snapshot(controller, scheduler):
    controller.query = "phish"
    scheduler.advance(0.3)

    snapshot = controller.snapshot()
    assert snapshot.query == "phish"
    assert names(snapshot.techniques) == PHISH_TECHNIQUES
    assert [g.label for g in snapshot.result_groups][0] == "threat groups"
    assert snapshot.data_component_labels == []
    assert snapshot.panels.expanded == controller.panels.expanded


def test_manual_scheduler_drives_only_due_callbacks():
    scheduler = ManualScheduler()
    fired = []
    scheduler.call_later(1.0, lambda: fired.append("late"))
    scheduler.call_later(0.5, lambda: fired.append("early"))
    scheduler.advance(0.5)
    assert fired == ["early"]
    assert scheduler.pending == 1
