"""
Base schemas and enums
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

# Enums for validation
class StixKind(str, Enum):
    TECHNIQUE = "technique"
    GROUP = "group"
    SOFTWARE = "software"
    MITIGATION = "mitigation"
    CAMPAIGN = "campaign"
    DATA_COMPONENT = "data_component"

# Kinds that relate to techniques through relationships
RELATABLE_KINDS = frozenset({
    StixKind.GROUP,
    StixKind.SOFTWARE,
    StixKind.MITIGATION,
    StixKind.CAMPAIGN,
})

# Base schemas
class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)
