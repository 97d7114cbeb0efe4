"""
Repository for stored domain versions, and a data store backed by it
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .base import BaseRepository
from ..database import DatabaseManager
from ..exceptions import DatabaseError, NotFoundError
from ..models.attack import (
    DomainVersion, AttackTechnique, AttackObject, AttackDataComponent, TechniqueRelationship
)
from ..schemas.base import StixKind
from ..schemas.stix import (
    Campaign, DataComponent, DataSourceRef, Domain, Group, Mitigation, Software, Technique
)

logger = logging.getLogger(__name__)

# Stored kind -> (schema class, Domain attribute, relationship type)
OBJECT_KINDS = {
    StixKind.GROUP.value: (Group, 'groups', 'uses'),
    StixKind.SOFTWARE.value: (Software, 'software', 'uses'),
    StixKind.MITIGATION.value: (Mitigation, 'mitigations', 'mitigates'),
    StixKind.CAMPAIGN.value: (Campaign, 'campaigns', 'uses'),
}

DETECTS = 'detects'

class DomainRepository(BaseRepository[DomainVersion]):
    """Saves and rebuilds Domain snapshots"""

    def __init__(self, session: Session):
        super().__init__(session, DomainVersion)

    def get_by_domain_version_id(self, domain_version_id: str) -> Optional[DomainVersion]:
        return self.find_one(domain_version_id=domain_version_id)

    def list_domain_version_ids(self) -> List[str]:
        return [row.domain_version_id for row in self.find_all(order_by=DomainVersion.domain_version_id)]

    def save_domain(self, domain: Domain) -> DomainVersion:
        """Store a domain, replacing any stored copy of the same version"""
        domain_version_id = domain.domain_version_id
        try:
            existing = self.get_by_domain_version_id(domain_version_id)
            if existing:
                logger.info(f"Replacing stored domain version {domain_version_id}")
                self.remove(existing)

            version = DomainVersion(
                domain_version_id=domain_version_id,
                name=domain.name,
                version=domain.version
            )
            self.session.add(version)
            self.session.flush()

            rows = []
            for position, technique in enumerate(domain.all_techniques()):
                rows.append(AttackTechnique(
                    domain_version=version,
                    position=position,
                    stix_id=technique.id,
                    attack_id=technique.attack_id,
                    name=technique.name,
                    description=technique.description,
                    datasources=technique.datasources,
                    is_subtechnique=technique.is_subtechnique,
                    parent_stix_id=technique.parent.id if technique.parent else None,
                    deprecated=technique.deprecated,
                    revoked=technique.revoked
                ))

            for kind, (_, attribute, relationship_type) in OBJECT_KINDS.items():
                for position, obj in enumerate(getattr(domain, attribute)):
                    rows.append(AttackObject(
                        domain_version=version,
                        kind=kind,
                        position=position,
                        stix_id=obj.id,
                        attack_id=obj.attack_id,
                        name=obj.name,
                        description=obj.description,
                        aliases=list(getattr(obj, 'aliases', [])),
                        software_type=getattr(obj, 'software_type', None),
                        deprecated=obj.deprecated,
                        revoked=obj.revoked
                    ))
                    for target in sorted(obj.related_techniques(domain_version_id)):
                        rows.append(TechniqueRelationship(
                            domain_version=version,
                            source_stix_id=obj.id,
                            target_stix_id=target,
                            relationship_type=relationship_type
                        ))

            for position, component in enumerate(domain.data_components):
                source = component.source(domain_version_id)
                rows.append(AttackDataComponent(
                    domain_version=version,
                    position=position,
                    stix_id=component.id,
                    name=component.name,
                    description=component.description,
                    source_name=source.name,
                    source_url=source.url,
                    deprecated=component.deprecated,
                    revoked=component.revoked
                ))
                targets = dict.fromkeys(t.id for t in component.techniques(domain_version_id))
                for target in targets:
                    rows.append(TechniqueRelationship(
                        domain_version=version,
                        source_stix_id=component.id,
                        target_stix_id=target,
                        relationship_type=DETECTS
                    ))

            self.session.add_all(rows)
            self.session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Failed to store domain version {domain_version_id}: {e}")
            raise DatabaseError(f"Failed to store domain version {domain_version_id}") from e

        logger.info(
            f"Stored domain version {domain_version_id}: "
            f"{len(domain.techniques)} techniques, {len(domain.subtechniques)} sub-techniques"
        )
        return version

    def load_domain(self, domain_version_id: str) -> Domain:
        """Rebuild the Domain snapshot of a stored version"""
        try:
            version = self.get_by_domain_version_id(domain_version_id)
            if version is None:
                raise NotFoundError(f"Domain version not stored: {domain_version_id}")
            technique_rows = list(version.techniques)
            object_rows = list(version.objects)
            component_rows = list(version.data_components)
            relationship_rows = list(version.relationships)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read domain version {domain_version_id}: {e}")
            raise DatabaseError(f"Failed to read domain version {domain_version_id}") from e

        targets_by_source: Dict[str, List[str]] = defaultdict(list)
        for rel in relationship_rows:
            targets_by_source[rel.source_stix_id].append(rel.target_stix_id)

        by_stix_id: Dict[str, Technique] = {}
        for row in technique_rows:
            by_stix_id[row.stix_id] = Technique(
                id=row.stix_id,
                name=row.name,
                attack_id=row.attack_id or '',
                description=row.description or '',
                datasources=row.datasources or '',
                is_subtechnique=row.is_subtechnique,
                deprecated=row.deprecated,
                revoked=row.revoked
            )

        domain = Domain(domain_version_id=domain_version_id, name=version.name, version=version.version)
        for row in technique_rows:
            technique = by_stix_id[row.stix_id]
            if not row.is_subtechnique:
                domain.techniques.append(technique)
                continue
            domain.subtechniques.append(technique)
            parent = by_stix_id.get(row.parent_stix_id)
            if parent is not None:
                parent.add_subtechnique(technique)
            else:
                logger.warning(f"Sub-technique {row.stix_id} has no stored parent")

        for row in object_rows:
            schema_class, attribute, _ = OBJECT_KINDS[row.kind]
            getattr(domain, attribute).append(schema_class(
                id=row.stix_id,
                name=row.name,
                attack_id=row.attack_id or '',
                description=row.description or '',
                aliases=row.aliases or [],
                software_type=row.software_type,
                deprecated=row.deprecated,
                revoked=row.revoked,
                related_technique_ids={domain_version_id: targets_by_source.get(row.stix_id, [])}
            ))

        for row in component_rows:
            domain.data_components.append(DataComponent(
                id=row.stix_id,
                name=row.name,
                description=row.description or '',
                deprecated=row.deprecated,
                revoked=row.revoked,
                sources={domain_version_id: DataSourceRef(name=row.source_name or '', url=row.source_url)},
                technique_refs={domain_version_id: [
                    by_stix_id[t] for t in targets_by_source.get(row.stix_id, []) if t in by_stix_id
                ]}
            ))

        logger.info(f"Loaded domain version {domain_version_id} from the database")
        return domain

class DatabaseDataStore:
    """Data store reading domains from the database, cached per version"""

    def __init__(self, manager: DatabaseManager):
        self.manager = manager
        self._cache: Dict[str, Domain] = {}

    def get_domain(self, domain_version_id: str) -> Domain:
        domain = self._cache.get(domain_version_id)
        if domain is None:
            with self.manager.session_scope() as session:
                domain = DomainRepository(session).load_domain(domain_version_id)
            self._cache[domain_version_id] = domain
        return domain

    def invalidate(self, domain_version_id: Optional[str] = None) -> None:
        """Drop one cached version, or all of them"""
        if domain_version_id is None:
            self._cache.clear()
        else:
            self._cache.pop(domain_version_id, None)
