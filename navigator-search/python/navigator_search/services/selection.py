"""
Selection and hover propagation from search results onto the matrix
"""

import logging
from typing import Sequence

from ..schemas.stix import StixObject, Technique
from ..signals import Signal
from ..view_model import ViewModel
from .relationships import RelationshipResolver

logger = logging.getLogger(__name__)

class SelectionPropagator:
    """
    Applies select/deselect/hover on techniques or on objects related to techniques.

    Every select or deselect call emits ``selection_changed`` once, after all
    related techniques have been updated. Batch operations go through the
    single-object calls, so they emit once per item.
    """

    def __init__(self, view_model: ViewModel, resolver: RelationshipResolver, selection_changed: Signal):
        self.view_model = view_model
        self.resolver = resolver
        self.selection_changed = selection_changed

    def _related(self, stix_object: StixObject):
        return self.resolver.get_related(stix_object, self.view_model.domain_version_id)

    def select(self, stix_object: StixObject, is_technique: bool = True) -> None:
        if is_technique:
            self.view_model.select_technique_across_tactics(stix_object)
        else:
            related = self._related(stix_object)
            logger.debug(f"Selecting {len(related)} technique(s) related to {stix_object.id}")
            for technique in related:
                self.view_model.select_technique_across_tactics(technique)
        self.selection_changed.emit()

    def deselect(self, stix_object: StixObject, is_technique: bool = True) -> None:
        if is_technique:
            self.view_model.unselect_technique_across_tactics(stix_object)
        else:
            related = self._related(stix_object)
            logger.debug(f"Deselecting {len(related)} technique(s) related to {stix_object.id}")
            for technique in related:
                self.view_model.unselect_technique_across_tactics(technique)
        self.selection_changed.emit()

    def select_all(self, items: Sequence[StixObject], is_technique_array: bool = True) -> None:
        for item in items:
            self.select(item, is_technique_array)

    def deselect_all(self, items: Sequence[StixObject], is_technique_array: bool = True) -> None:
        for item in items:
            self.deselect(item, is_technique_array)

    def mouse_enter(self, stix_object: StixObject, is_technique: bool = True) -> None:
        if is_technique:
            self.view_model.highlight_technique(stix_object)
        else:
            for technique in self._related(stix_object):
                self.view_model.select_technique_across_tactics(technique, walk_children=True, highlight=True)

    def mouse_enter_all(self, techniques: Sequence[Technique]) -> None:
        for technique in techniques:
            self.mouse_enter(technique)

    def mouse_leave(self) -> None:
        self.view_model.clear_highlight()
