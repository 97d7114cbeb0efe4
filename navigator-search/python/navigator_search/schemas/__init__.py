"""
Pydantic schemas for the search layer

Schema organization:
- base.py: Base schema, StixKind enum and the set of relatable kinds
- stix.py: STIX object variants (techniques, groups, software, mitigations,
  campaigns, data components) and the per-version Domain snapshot
- search.py: Search fields, result groups, panel expansion state
"""

from .base import BaseSchema, StixKind, RELATABLE_KINDS
from .stix import (
    StixObject, Technique, RelatableObject, Group, Software, Mitigation, Campaign,
    DataSourceRef, DataComponent, Domain
)
from .search import (
    PANEL_COUNT, TECHNIQUES_PANEL, GROUPS_PANEL, SOFTWARE_PANEL, CAMPAIGNS_PANEL,
    MITIGATIONS_PANEL, DATA_COMPONENTS_PANEL,
    SearchField, default_search_fields, ResultGroup, DataComponentEntry,
    PanelExpansionState, SearchSnapshot
)

# Export all schemas
__all__ = [
    # Base
    'BaseSchema', 'StixKind', 'RELATABLE_KINDS',
    # STIX
    'StixObject', 'Technique', 'RelatableObject', 'Group', 'Software', 'Mitigation', 'Campaign',
    'DataSourceRef', 'DataComponent', 'Domain',
    # Search
    'PANEL_COUNT', 'TECHNIQUES_PANEL', 'GROUPS_PANEL', 'SOFTWARE_PANEL', 'CAMPAIGNS_PANEL',
    'MITIGATIONS_PANEL', 'DATA_COMPONENTS_PANEL',
    'SearchField', 'default_search_fields', 'ResultGroup', 'DataComponentEntry',
    'PanelExpansionState', 'SearchSnapshot'
]
