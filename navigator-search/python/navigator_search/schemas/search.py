"""
Search state schemas: fields, result groups, panel expansion
"""

from typing import List, Optional

from pydantic import Field, field_validator

from .base import BaseSchema, StixKind
from .stix import StixObject, Technique

PANEL_COUNT = 6

# Panel indices
TECHNIQUES_PANEL = 0
GROUPS_PANEL = 1
SOFTWARE_PANEL = 2
CAMPAIGNS_PANEL = 3
MITIGATIONS_PANEL = 4
DATA_COMPONENTS_PANEL = 5

class SearchField(BaseSchema):
    label: str
    field: str
    enabled: bool = True

def default_search_fields() -> List[SearchField]:
    """Fresh copy of the default field list, in match-precedence order"""
    return [
        SearchField(label="name", field="name"),
        SearchField(label="DISARM ID", field="attack_id"),
        SearchField(label="description", field="description"),
        SearchField(label="data sources", field="datasources"),
    ]

class ResultGroup(BaseSchema):
    label: str
    kind: StixKind
    objects: List[StixObject] = Field(default_factory=list)

class DataComponentEntry(BaseSchema):
    objects: List[Technique] = Field(default_factory=list)
    url: Optional[str] = None

class PanelExpansionState(BaseSchema):
    expanded: List[bool] = Field(
        default_factory=lambda: [True] + [False] * (PANEL_COUNT - 1)
    )
    user_overrode: bool = False

    @field_validator('expanded')
    @classmethod
    def check_panel_count(cls, v):
        if len(v) != PANEL_COUNT:
            raise ValueError(f"expected {PANEL_COUNT} panel flags, got {len(v)}")
        return v

class SearchSnapshot(BaseSchema):
    query: str
    techniques: List[Technique]
    result_groups: List[ResultGroup]
    data_component_labels: List[str]
    panels: PanelExpansionState
