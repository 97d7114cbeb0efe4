"""
View model interface consumed by the selection logic, plus an in-memory one
"""

from typing import Protocol, Set

from .schemas.stix import Technique

class ViewModel(Protocol):
    domain_version_id: str

    def select_technique_across_tactics(
        self, technique: Technique, walk_children: bool = True, highlight: bool = False
    ) -> None:
        ...

    def unselect_technique_across_tactics(self, technique: Technique) -> None:
        ...

    def highlight_technique(self, technique: Technique) -> None:
        ...

    def clear_highlight(self) -> None:
        ...

class TechniqueViewModel:
    """
    Tracks selection and highlight per technique ID.

    A technique ID stands for the technique in every tactic it appears under,
    so selecting it here is a cross-tactic selection. Highlight and selection
    are independent.
    """

    def __init__(self, domain_version_id: str, select_subtechniques_with_parent: bool = False):
        self.domain_version_id = domain_version_id
        self.select_subtechniques_with_parent = select_subtechniques_with_parent
        self.selected: Set[str] = set()
        self.highlighted: Set[str] = set()

    def select_technique_across_tactics(
        self, technique: Technique, walk_children: bool = True, highlight: bool = False
    ) -> None:
        target = self.highlighted if highlight else self.selected
        target.add(technique.id)
        if walk_children and self.select_subtechniques_with_parent:
            target.update(sub.id for sub in technique.subtechniques)

    def unselect_technique_across_tactics(self, technique: Technique) -> None:
        self.selected.discard(technique.id)
        if self.select_subtechniques_with_parent:
            self.selected.difference_update(sub.id for sub in technique.subtechniques)

    def highlight_technique(self, technique: Technique) -> None:
        self.highlighted.add(technique.id)

    def clear_highlight(self) -> None:
        self.highlighted.clear()

    def is_selected(self, technique: Technique) -> bool:
        return technique.id in self.selected

    def is_highlighted(self, technique: Technique) -> bool:
        return technique.id in self.highlighted
