"""
Stored domain versions: techniques, related objects, data components and
the relationships that tie them to techniques
"""

from typing import List, Optional

from sqlalchemy import Integer, String, Text, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column

from .base import Base, TimestampMixin, StixRowMixin, VersionScopedMixin

class DomainVersion(Base, TimestampMixin):
    __tablename__ = 'domain_versions'

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    domain_version_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), default='')
    version: Mapped[str] = mapped_column(String(50), default='')

    # Relationships
    techniques: Mapped[List["AttackTechnique"]] = relationship(
        "AttackTechnique",
        back_populates="domain_version",
        cascade="all, delete-orphan",
        order_by="AttackTechnique.position"
    )
    objects: Mapped[List["AttackObject"]] = relationship(
        "AttackObject",
        back_populates="domain_version",
        cascade="all, delete-orphan",
        order_by="AttackObject.position"
    )
    data_components: Mapped[List["AttackDataComponent"]] = relationship(
        "AttackDataComponent",
        back_populates="domain_version",
        cascade="all, delete-orphan",
        order_by="AttackDataComponent.position"
    )
    relationships: Mapped[List["TechniqueRelationship"]] = relationship(
        "TechniqueRelationship",
        back_populates="domain_version",
        cascade="all, delete-orphan",
        order_by="TechniqueRelationship.id"
    )

class AttackTechnique(Base, StixRowMixin):
    __tablename__ = 'attack_techniques'

    attack_id: Mapped[str] = mapped_column(String(50), default='')
    datasources: Mapped[Optional[str]] = mapped_column(Text)
    is_subtechnique: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    parent_stix_id: Mapped[Optional[str]] = mapped_column(String(255))

    domain_version: Mapped["DomainVersion"] = relationship("DomainVersion", back_populates="techniques")

    __table_args__ = (
        UniqueConstraint('domain_version_pk', 'stix_id', name='unique_version_technique'),
    )

class AttackObject(Base, StixRowMixin):
    """Groups, software, mitigations and campaigns, told apart by ``kind``"""
    __tablename__ = 'attack_objects'

    kind: Mapped[str] = mapped_column(String(50), nullable=False)
    attack_id: Mapped[str] = mapped_column(String(50), default='')
    aliases: Mapped[Optional[List[str]]] = mapped_column(JSON)
    software_type: Mapped[Optional[str]] = mapped_column(String(50))

    domain_version: Mapped["DomainVersion"] = relationship("DomainVersion", back_populates="objects")

    __table_args__ = (
        UniqueConstraint('domain_version_pk', 'stix_id', name='unique_version_object'),
    )

class AttackDataComponent(Base, StixRowMixin):
    __tablename__ = 'attack_data_components'

    source_name: Mapped[str] = mapped_column(String(255), default='')
    source_url: Mapped[Optional[str]] = mapped_column(Text)

    domain_version: Mapped["DomainVersion"] = relationship("DomainVersion", back_populates="data_components")

    __table_args__ = (
        UniqueConstraint('domain_version_pk', 'stix_id', name='unique_version_data_component'),
    )

class TechniqueRelationship(Base, VersionScopedMixin):
    """Edge from a group, software, mitigation, campaign or data component to a technique"""
    __tablename__ = 'technique_relationships'

    source_stix_id: Mapped[str] = mapped_column(String(255), nullable=False)
    target_stix_id: Mapped[str] = mapped_column(String(255), nullable=False)
    relationship_type: Mapped[str] = mapped_column(String(50), nullable=False)

    domain_version: Mapped["DomainVersion"] = relationship("DomainVersion", back_populates="relationships")

    __table_args__ = (
        UniqueConstraint(
            'domain_version_pk', 'source_stix_id', 'target_stix_id', 'relationship_type',
            name='unique_version_relationship'
        ),
    )
