"""
Search and multi-select services

Service organization:
- filtering.py: Status/query filtering and collated name sorting of collections and labels
- panels.py: Automatic expansion of the six result panels
- relationships.py: Non-technique objects to the techniques they relate to
- query_controller.py: Debounced query evaluation, incremental vs. full rescans
- selection.py: Select/deselect/hover propagation onto the view model
"""

from .filtering import collation_key, filter_and_sort, filter_and_sort_labels
from .panels import PanelExpansionHeuristic
from .relationships import RelationshipResolver
from .query_controller import QueryController, QueryState, RESULT_GROUP_TYPES
from .selection import SelectionPropagator

__all__ = [
    'collation_key', 'filter_and_sort', 'filter_and_sort_labels',
    'PanelExpansionHeuristic',
    'RelationshipResolver',
    'QueryController', 'QueryState', 'RESULT_GROUP_TYPES',
    'SelectionPropagator'
]
