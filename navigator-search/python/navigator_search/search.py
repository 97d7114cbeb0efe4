"""
Search and multi-select panel: query handling plus selection in one object
"""

from typing import List, Optional, Sequence

from .config import SearchSettings
from .repositories.store import DataStore
from .scheduling import Scheduler
from .schemas.search import ResultGroup, SearchField, SearchSnapshot
from .schemas.stix import StixObject, Technique
from .services.query_controller import QueryController, QueryState
from .services.relationships import RelationshipResolver
from .services.selection import SelectionPropagator
from .signals import Signal
from .view_model import ViewModel

class SearchAndMultiselect:
    """
    Backs the search sidebar of the matrix view.

    Usage:
        search = SearchAndMultiselect(store, view_model)
        search.load()
        search.query = "phish"        # evaluated after the debounce delay
        search.select(group, is_technique=False)

    Query updates are debounced on the running asyncio event loop. Outside a
    loop, pass a ``scheduler`` (anything with ``call_later(delay, callback)``);
    otherwise setting ``query`` raises ``ValidationError``.
    """

    def __init__(
        self,
        store: DataStore,
        view_model: ViewModel,
        settings: Optional[SearchSettings] = None,
        scheduler: Optional[Scheduler] = None,
        selection_changed: Optional[Signal] = None
    ):
        self.view_model = view_model
        self.selection_changed = selection_changed or Signal("selection_changed")
        self.controller = QueryController(store, view_model, settings=settings, scheduler=scheduler)
        self.resolver = RelationshipResolver(store)
        self.propagator = SelectionPropagator(view_model, self.resolver, self.selection_changed)

    def load(self) -> None:
        self.controller.load()

    # --- Query ---

    @property
    def query(self) -> str:
        return self.controller.query

    @query.setter
    def query(self, new_query: str) -> None:
        self.controller.set_query(new_query)

    @property
    def query_length(self) -> int:
        return self.controller.query_length

    @property
    def state(self) -> QueryState:
        return self.controller.state

    def get_results(self, query: str = "", field_toggled: bool = False) -> None:
        self.controller.get_results(query, field_toggled)

    @property
    def fields(self) -> List[SearchField]:
        return self.controller.fields

    def toggle_field_enabled(self, field: str) -> Optional[bool]:
        return self.controller.toggle_field_enabled(field)

    # --- Results ---

    @property
    def technique_results(self) -> List[Technique]:
        return self.controller.technique_results

    @property
    def result_groups(self) -> List[ResultGroup]:
        return self.controller.result_groups

    @property
    def data_component_labels(self) -> List[str]:
        return self.controller.data_component_labels

    @property
    def data_component_results(self) -> List[Technique]:
        return self.controller.data_component_results

    def data_component_url(self, label: str) -> Optional[str]:
        entry = self.controller.data_components.get(label)
        return entry.url if entry else None

    # --- Panels ---

    @property
    def expanded_panels(self) -> List[bool]:
        return list(self.controller.panels.expanded)

    def toggle_panel(self, index: int) -> bool:
        return self.controller.panels.toggle(index)

    def snapshot(self) -> SearchSnapshot:
        return self.controller.snapshot()

    # --- Selection ---

    def get_related(self, stix_object: StixObject) -> List[Technique]:
        return self.resolver.get_related(stix_object, self.view_model.domain_version_id)

    def select(self, stix_object: StixObject, is_technique: bool = True) -> None:
        self.propagator.select(stix_object, is_technique)

    def deselect(self, stix_object: StixObject, is_technique: bool = True) -> None:
        self.propagator.deselect(stix_object, is_technique)

    def select_all(self, items: Sequence[StixObject], is_technique_array: bool = True) -> None:
        self.propagator.select_all(items, is_technique_array)

    def deselect_all(self, items: Sequence[StixObject], is_technique_array: bool = True) -> None:
        self.propagator.deselect_all(items, is_technique_array)

    def mouse_enter(self, stix_object: StixObject, is_technique: bool = True) -> None:
        self.propagator.mouse_enter(stix_object, is_technique)

    def mouse_enter_all(self, techniques: Sequence[Technique]) -> None:
        self.propagator.mouse_enter_all(techniques)

    def mouse_leave(self) -> None:
        self.propagator.mouse_leave()
