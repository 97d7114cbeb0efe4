"""
SQLAlchemy models for stored domain versions

Model organization:
- base.py: Base class, timestamp mixin and per-version row mixins
- attack.py: Domain versions with their techniques, related objects,
  data components and technique relationships
"""

from .base import Base, TimestampMixin, VersionScopedMixin, StixRowMixin
from .attack import (
    DomainVersion, AttackTechnique, AttackObject, AttackDataComponent, TechniqueRelationship
)

# Export all models
__all__ = [
    # Base
    'Base', 'TimestampMixin', 'VersionScopedMixin', 'StixRowMixin',
    # Domain versions
    'DomainVersion', 'AttackTechnique', 'AttackObject', 'AttackDataComponent', 'TechniqueRelationship'
]
