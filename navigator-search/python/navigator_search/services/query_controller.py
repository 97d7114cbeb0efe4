"""
Query handling: debounced evaluation, incremental filtering and full rescans
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from ..config import SearchSettings
from ..repositories.store import DataStore
from ..scheduling import Debouncer, Scheduler
from ..schemas.base import StixKind
from ..schemas.search import DataComponentEntry, ResultGroup, SearchField, SearchSnapshot
from ..schemas.stix import Domain, Technique
from ..view_model import ViewModel
from .filtering import filter_and_sort, filter_and_sort_labels
from .panels import PanelExpansionHeuristic

logger = logging.getLogger(__name__)

class QueryState(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"

# Result groups in panel order (panels 1..4)
RESULT_GROUP_TYPES = (
    ("threat groups", StixKind.GROUP, "groups"),
    ("software", StixKind.SOFTWARE, "software"),
    ("campaigns", StixKind.CAMPAIGN, "campaigns"),
    ("mitigations", StixKind.MITIGATION, "mitigations"),
)

class QueryController:
    """
    Owns the search query and the result sets derived from it.

    Typing updates the query immediately but evaluation waits for the
    debounce timer. An evaluation either narrows the current results (when
    the new query extends the previous one) or rescans the data store.
    """

    def __init__(
        self,
        store: DataStore,
        view_model: ViewModel,
        settings: Optional[SearchSettings] = None,
        scheduler: Optional[Scheduler] = None,
        panels: Optional[PanelExpansionHeuristic] = None
    ):
        self.store = store
        self.view_model = view_model
        self.settings = settings or SearchSettings()
        self.settings.apply_collation_locale()
        self.fields: List[SearchField] = [f.model_copy() for f in self.settings.search_fields]
        self.panels = panels or PanelExpansionHeuristic()

        self.technique_results: List[Technique] = []
        self.result_groups: List[ResultGroup] = []
        self.data_components: Dict[str, DataComponentEntry] = {}
        self.data_component_labels: List[str] = []

        self.previous_query = ""
        self._query = ""
        self._debouncer = Debouncer(self.settings.debounce_seconds, self._on_debounce, scheduler)

    # --- Query text ---

    @property
    def query(self) -> str:
        return self._query

    @query.setter
    def query(self, new_query: str) -> None:
        self.set_query(new_query)

    def set_query(self, new_query: str) -> None:
        """Store the new query now; evaluate it once the debounce timer fires"""
        self._query = new_query
        self._debouncer.schedule()

    @property
    def query_length(self) -> int:
        return len(self._query)

    @property
    def state(self) -> QueryState:
        return QueryState.DEBOUNCING if self._debouncer.pending else QueryState.IDLE

    def _on_debounce(self) -> None:
        self.get_results(self._query)

    # --- Evaluation ---

    def load(self) -> None:
        """Initial population of every result set"""
        self.get_results()

    def get_results(self, query: str = "", field_toggled: bool = False) -> None:
        """
        Recompute the result sets for ``query``.

        A non-empty query that contains the previous one only narrows the
        results, so the current results are filtered again locally. Anything
        else, including a field toggle, rescans the data store. A field
        toggle rescans with the live query so the displayed text stays as is.
        """
        if query.strip() != "" and self.previous_query in query and not field_toggled:
            effective_query = query
            self._filter_incrementally(effective_query)
        else:
            effective_query = self._query if field_toggled else query
            self._rescan(effective_query)

        self.data_component_labels = filter_and_sort_labels(list(self.data_components), effective_query)
        self.panels.update(self.technique_results, self.result_groups, self.data_component_labels)
        self.previous_query = effective_query

    def _filter_incrementally(self, query: str) -> None:
        logger.debug(f"Narrowing existing results for query {query!r}")
        self.technique_results = filter_and_sort(
            self.technique_results, query, fields=self.fields, sort_hierarchy=True
        )
        self.result_groups = [
            group.model_copy(update={'objects': filter_and_sort(group.objects, query, fields=self.fields)})
            for group in self.result_groups
        ]

    def _rescan(self, query: str) -> None:
        domain_version_id = self.view_model.domain_version_id
        logger.debug(f"Full rescan of domain {domain_version_id} for query {query!r}")
        domain = self.store.get_domain(domain_version_id)

        self.technique_results = filter_and_sort(
            self._technique_universe(domain), query, fields=self.fields, sort_hierarchy=True
        )
        self.result_groups = [
            ResultGroup(
                label=label,
                kind=kind,
                objects=filter_and_sort(getattr(domain, attribute), query, fields=self.fields)
            )
            for label, kind, attribute in RESULT_GROUP_TYPES
        ]

        data_components = {}
        for component in domain.data_components:
            if component.deprecated or component.revoked:
                continue
            source = component.source(domain_version_id)
            label = f"{source.name}: {component.name}"
            data_components[label] = DataComponentEntry(
                objects=component.techniques(domain_version_id),
                url=source.url
            )
        self.data_components = data_components

    @staticmethod
    def _technique_universe(domain: Domain) -> List[Technique]:
        """
        Top-level techniques, the sub-techniques of each, then any sub-technique
        whose parent is missing. Covers the same techniques as
        ``Domain.all_techniques`` so everything selectable is searchable.
        """
        techniques = list(domain.techniques)
        for technique in domain.techniques:
            techniques.extend(technique.subtechniques)
        seen = {t.id for t in techniques}
        techniques.extend(t for t in domain.subtechniques if t.id not in seen)
        return techniques

    # --- Fields and derived views ---

    def toggle_field_enabled(self, field: str) -> Optional[bool]:
        """Flip a search field and rescan; returns the field's new state"""
        for search_field in self.fields:
            if search_field.field == field:
                search_field.enabled = not search_field.enabled
                logger.debug(f"Search field {field} enabled={search_field.enabled}")
                self.get_results("", field_toggled=True)
                return search_field.enabled

        logger.warning(f"Ignoring toggle of unknown search field: {field}")
        return None

    @property
    def data_component_results(self) -> List[Technique]:
        """Techniques of every data component currently listed"""
        results = []
        for label in self.data_component_labels:
            results.extend(self.data_components[label].objects)
        return results

    def snapshot(self) -> SearchSnapshot:
        return SearchSnapshot(
            query=self._query,
            techniques=list(self.technique_results),
            result_groups=list(self.result_groups),
            data_component_labels=list(self.data_component_labels),
            panels=self.panels.state
        )
