"""
STIX object schemas for a single domain version

Objects are compared and hashed by (kind, id) so that the technique
hierarchy (parent <-> subtechniques) never recurses during comparison.
"""

from typing import List, Optional, Dict, Set

from pydantic import Field

from .base import BaseSchema, StixKind

class StixObject(BaseSchema):
    id: str
    name: str
    kind: StixKind
    deprecated: bool = False
    revoked: bool = False

    def __eq__(self, other):
        if not isinstance(other, StixObject):
            return NotImplemented
        return self.kind == other.kind and self.id == other.id

    def __hash__(self):
        return hash((self.kind, self.id))

# Technique schemas
class Technique(StixObject):
    kind: StixKind = StixKind.TECHNIQUE
    attack_id: str = ""
    description: str = ""
    datasources: str = ""
    is_subtechnique: bool = False
    parent: Optional["Technique"] = Field(default=None, exclude=True, repr=False)
    subtechniques: List["Technique"] = Field(default_factory=list, exclude=True, repr=False)

    @property
    def display_name(self) -> str:
        """Name the technique sorts under: the parent's name for sub-techniques"""
        if self.is_subtechnique and self.parent is not None:
            return self.parent.name
        return self.name

    def add_subtechnique(self, subtechnique: "Technique") -> None:
        subtechnique.parent = self
        subtechnique.is_subtechnique = True
        self.subtechniques.append(subtechnique)

Technique.model_rebuild()

# Objects that reach techniques through relationships
class RelatableObject(StixObject):
    attack_id: str = ""
    description: str = ""
    related_technique_ids: Dict[str, List[str]] = Field(default_factory=dict, repr=False)

    def related_techniques(self, domain_version_id: str) -> Set[str]:
        """IDs of the techniques this object relates to in a domain version"""
        return set(self.related_technique_ids.get(domain_version_id, ()))

class Group(RelatableObject):
    kind: StixKind = StixKind.GROUP
    aliases: List[str] = Field(default_factory=list)

class Software(RelatableObject):
    kind: StixKind = StixKind.SOFTWARE
    software_type: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)

class Mitigation(RelatableObject):
    kind: StixKind = StixKind.MITIGATION

class Campaign(RelatableObject):
    kind: StixKind = StixKind.CAMPAIGN
    aliases: List[str] = Field(default_factory=list)

# Data component schemas
class DataSourceRef(BaseSchema):
    name: str = ""
    url: Optional[str] = None

class DataComponent(StixObject):
    kind: StixKind = StixKind.DATA_COMPONENT
    description: str = ""
    sources: Dict[str, DataSourceRef] = Field(default_factory=dict, repr=False)
    technique_refs: Dict[str, List[Technique]] = Field(default_factory=dict, exclude=True, repr=False)

    def source(self, domain_version_id: str) -> DataSourceRef:
        """Data source this component belongs to; empty when unknown"""
        return self.sources.get(domain_version_id) or DataSourceRef()

    def techniques(self, domain_version_id: str) -> List[Technique]:
        """Techniques detected by this component in a domain version"""
        return list(self.technique_refs.get(domain_version_id, ()))

# Domain snapshot
class Domain(BaseSchema):
    domain_version_id: str
    name: str = ""
    version: str = ""
    techniques: List[Technique] = Field(default_factory=list)
    subtechniques: List[Technique] = Field(default_factory=list)
    groups: List[Group] = Field(default_factory=list)
    software: List[Software] = Field(default_factory=list)
    mitigations: List[Mitigation] = Field(default_factory=list)
    campaigns: List[Campaign] = Field(default_factory=list)
    data_components: List[DataComponent] = Field(default_factory=list)

    def all_techniques(self) -> List[Technique]:
        """Top-level techniques followed by all sub-techniques"""
        return self.techniques + self.subtechniques
