"""
Automatic expansion of the result panels
"""

import logging
from typing import List, Sequence

from ..exceptions import ValidationError
from ..schemas.search import (
    PANEL_COUNT, TECHNIQUES_PANEL, DATA_COMPONENTS_PANEL,
    PanelExpansionState, ResultGroup
)

logger = logging.getLogger(__name__)

class PanelExpansionHeuristic:
    """
    Decides which of the six result panels are expanded after each search.

    Panels: 0 techniques, 1 groups, 2 software, 3 campaigns, 4 mitigations,
    5 data components. Once the user expands or collapses a panel by hand the
    heuristic stands down until every panel is collapsed again.
    """

    def __init__(self):
        initial = PanelExpansionState()
        self.expanded: List[bool] = list(initial.expanded)
        self.user_overrode = initial.user_overrode

    @property
    def state(self) -> PanelExpansionState:
        return PanelExpansionState(expanded=list(self.expanded), user_overrode=self.user_overrode)

    def is_expanded(self, index: int) -> bool:
        self._check_index(index)
        return self.expanded[index]

    def toggle(self, index: int) -> bool:
        """Manually expand or collapse a panel; returns its new state"""
        self._check_index(index)
        self.expanded[index] = not self.expanded[index]
        self.user_overrode = True
        logger.debug(f"Panel {index} toggled by user (expanded={self.expanded[index]})")
        return self.expanded[index]

    def update(
        self,
        technique_results: Sequence,
        result_groups: Sequence[ResultGroup],
        data_component_labels: Sequence[str]
    ) -> None:
        """Recompute expansion from the latest result sets"""
        if self.user_overrode:
            # Hand control back once the user has collapsed everything
            self.user_overrode = any(self.expanded)
            return

        self.expanded[TECHNIQUES_PANEL] = len(technique_results) > 0
        is_prev_expanded = self.expanded[TECHNIQUES_PANEL]
        if not is_prev_expanded:
            for index, group in enumerate(result_groups, start=1):
                # Carry the panel's flag from before this update, not the new one
                stale = self.expanded[index]
                self.expanded[index] = not is_prev_expanded and len(group.objects) > 0
                is_prev_expanded = stale
        self.expanded[DATA_COMPONENTS_PANEL] = not is_prev_expanded and len(data_component_labels) > 0

    def _check_index(self, index: int) -> None:
        if not 0 <= index < PANEL_COUNT:
            raise ValidationError(f"Panel index must be between 0 and {PANEL_COUNT - 1}, got {index}")
