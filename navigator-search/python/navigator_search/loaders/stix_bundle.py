"""
Builds Domain snapshots from ATT&CK-style STIX 2.x bundles
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional

import requests
from stix2 import MemoryStore, Filter
from stix2.exceptions import STIXError

from ..config import SearchSettings
from ..exceptions import ValidationError
from ..schemas.stix import (
    Campaign, DataComponent, DataSourceRef, Domain, Group, Mitigation, Software, Technique
)
from ..utils import get_external_id, get_external_url, is_deprecated, is_revoked, join_data_sources

logger = logging.getLogger(__name__)

# Relationship types linking an object to the techniques it relates to
RELATED_TECHNIQUE_TYPES = ('uses', 'mitigates')

class StixBundleLoader:
    """Downloads STIX bundles and maps their objects onto a Domain"""

    # MITRE ATT&CK STIX data sources
    MITRE_ENTERPRISE_URL = "https://raw.githubusercontent.com/mitre/cti/master/enterprise-attack/enterprise-attack.json"
    MITRE_MOBILE_URL = "https://raw.githubusercontent.com/mitre/cti/master/mobile-attack/mobile-attack.json"
    MITRE_ICS_URL = "https://raw.githubusercontent.com/mitre/cti/master/ics-attack/ics-attack.json"

    def __init__(self, settings: Optional[SearchSettings] = None, http_session: Optional[requests.Session] = None):
        self.settings = settings or SearchSettings()
        self.http = http_session or requests.Session()
        self._positions: Dict[str, int] = {}

    def download_bundle(self, url: str) -> Optional[Dict[str, Any]]:
        """Download a STIX bundle; returns None when it cannot be fetched or parsed"""
        try:
            logger.info(f"Downloading STIX data from: {url}")
            response = self.http.get(url, timeout=self.settings.request_timeout)
            response.raise_for_status()

            bundle = response.json()
            logger.info(f"Downloaded {len(bundle.get('objects', []))} STIX objects")
            return bundle

        except requests.RequestException as e:
            logger.error(f"Failed to download STIX data from {url}: {e}")
            return None
        except ValueError as e:
            logger.error(f"Failed to parse STIX JSON from {url}: {e}")
            return None

    def load(self, url: str, domain_version_id: str, name: str = "", version: str = "") -> Optional[Domain]:
        """Download a bundle and build its Domain"""
        bundle = self.download_bundle(url)
        if bundle is None:
            return None
        return self.build_domain(bundle, domain_version_id, name=name, version=version)

    def build_domain(
        self,
        bundle: Dict[str, Any],
        domain_version_id: str,
        name: str = "",
        version: str = ""
    ) -> Domain:
        """
        Map a STIX bundle onto a Domain.

        Techniques come from attack-pattern objects and are linked to their
        parents through subtechnique-of relationships. Groups, software,
        mitigations and campaigns get their related techniques from uses and
        mitigates relationships; data components from detects relationships.
        Objects without an external ID and deprecated or revoked
        relationships are skipped.
        """
        if not isinstance(bundle, dict) or not isinstance(bundle.get('objects'), list):
            raise ValidationError("Invalid STIX data format: bundle has no object list")

        stix_objects = [obj for obj in bundle['objects'] if isinstance(obj, dict) and 'id' in obj]
        # Query results come back unordered; keep the bundle's order
        self._positions = {obj['id']: position for position, obj in enumerate(stix_objects)}

        # Create STIX memory store for relationship resolution
        try:
            memory_store = MemoryStore(stix_data=stix_objects, allow_custom=True)
        except (STIXError, ValueError) as e:
            raise ValidationError(f"Invalid STIX object in bundle: {e}") from e

        domain = Domain(domain_version_id=domain_version_id, name=name, version=version)
        techniques = self._build_techniques(self._query(memory_store, 'attack-pattern'))

        for rel in self._relationships(memory_store, 'subtechnique-of'):
            subtechnique, parent = techniques.get(rel['source_ref']), techniques.get(rel['target_ref'])
            if subtechnique and parent:
                parent.add_subtechnique(subtechnique)

        related = self._technique_targets(memory_store, RELATED_TECHNIQUE_TYPES, techniques)
        detected = self._technique_targets(memory_store, ('detects',), techniques)

        domain.techniques = [t for t in techniques.values() if not t.is_subtechnique]
        domain.subtechniques = [t for t in techniques.values() if t.is_subtechnique]

        domain.groups = self._build_related(
            self._query(memory_store, 'intrusion-set'), Group, related, domain_version_id
        )
        domain.software = self._build_related(
            self._query(memory_store, 'malware', 'tool'), Software, related, domain_version_id
        )
        domain.mitigations = self._build_related(
            self._query(memory_store, 'course-of-action'), Mitigation, related, domain_version_id
        )
        domain.campaigns = self._build_related(
            self._query(memory_store, 'campaign'), Campaign, related, domain_version_id
        )
        domain.data_components = self._build_data_components(
            self._query(memory_store, 'x-mitre-data-component'),
            self._query(memory_store, 'x-mitre-data-source'),
            techniques, detected, domain_version_id
        )

        logger.info(
            f"Built domain {domain_version_id} - Techniques: {len(domain.techniques)}, "
            f"Sub-techniques: {len(domain.subtechniques)}, Groups: {len(domain.groups)}, "
            f"Software: {len(domain.software)}, Mitigations: {len(domain.mitigations)}, "
            f"Campaigns: {len(domain.campaigns)}, Data components: {len(domain.data_components)}"
        )
        return domain

    def _query(self, memory_store: MemoryStore, *stix_types: str) -> list:
        """Objects of the given types, in bundle order"""
        if len(stix_types) == 1:
            type_filter = Filter('type', '=', stix_types[0])
        else:
            type_filter = Filter('type', 'in', stix_types)
        results = memory_store.query([type_filter])
        return sorted(results, key=lambda obj: self._positions.get(obj['id'], len(self._positions)))

    def _relationships(self, memory_store: MemoryStore, *relationship_types: str) -> list:
        """Active relationships of the given types, in bundle order"""
        if len(relationship_types) == 1:
            type_filter = Filter('relationship_type', '=', relationship_types[0])
        else:
            type_filter = Filter('relationship_type', 'in', relationship_types)
        relationships = memory_store.query([
            Filter('type', '=', 'relationship'),
            type_filter
        ])
        relationships = [rel for rel in relationships if not is_deprecated(rel) and not is_revoked(rel)]
        return sorted(relationships, key=lambda rel: self._positions.get(rel['id'], len(self._positions)))

    def _technique_targets(self, memory_store, relationship_types, techniques) -> Dict[str, List[str]]:
        """Source ID -> IDs of the known techniques it points at"""
        targets: Dict[str, List[str]] = defaultdict(list)
        for rel in self._relationships(memory_store, *relationship_types):
            if rel['target_ref'] in techniques:
                targets[rel['source_ref']].append(rel['target_ref'])
        return targets

    def _build_techniques(self, stix_objects) -> Dict[str, Technique]:
        techniques: Dict[str, Technique] = {}
        for stix_obj in stix_objects:
            attack_id = get_external_id(stix_obj, self.settings.attack_id_sources)
            if not attack_id:
                logger.warning(f"No external ID found for technique {stix_obj['id']}")
                continue
            techniques[stix_obj['id']] = Technique(
                id=stix_obj['id'],
                name=stix_obj.get('name', ''),
                attack_id=attack_id,
                description=stix_obj.get('description', ''),
                datasources=join_data_sources(stix_obj),
                is_subtechnique=bool(stix_obj.get('x_mitre_is_subtechnique', False)),
                deprecated=is_deprecated(stix_obj),
                revoked=is_revoked(stix_obj)
            )
        return techniques

    def _build_related(self, stix_objects, schema_class, related, domain_version_id) -> list:
        results = []
        for stix_obj in stix_objects:
            attack_id = get_external_id(stix_obj, self.settings.attack_id_sources)
            if not attack_id:
                logger.warning(f"No external ID found for {stix_obj['type']} {stix_obj['id']}")
                continue
            results.append(schema_class(
                id=stix_obj['id'],
                name=stix_obj.get('name', ''),
                attack_id=attack_id,
                description=stix_obj.get('description', ''),
                aliases=list(stix_obj.get('aliases') or stix_obj.get('x_mitre_aliases') or []),
                software_type=stix_obj['type'],
                deprecated=is_deprecated(stix_obj),
                revoked=is_revoked(stix_obj),
                related_technique_ids={domain_version_id: list(dict.fromkeys(related.get(stix_obj['id'], [])))}
            ))
        return results

    def _build_data_components(self, components, sources, techniques, detected, domain_version_id) -> List[DataComponent]:
        source_refs = {
            source['id']: DataSourceRef(name=source.get('name', ''), url=get_external_url(source))
            for source in sources
        }

        results = []
        for component in components:
            source = source_refs.get(component.get('x_mitre_data_source_ref'), DataSourceRef())
            technique_ids = dict.fromkeys(detected.get(component['id'], []))
            results.append(DataComponent(
                id=component['id'],
                name=component.get('name', ''),
                description=component.get('description', ''),
                deprecated=is_deprecated(component),
                revoked=is_revoked(component),
                sources={domain_version_id: source},
                technique_refs={domain_version_id: [techniques[t] for t in technique_ids]}
            ))
        return results
