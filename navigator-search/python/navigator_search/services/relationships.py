"""
Resolution of groups, software, mitigations and campaigns to their techniques
"""

import logging
from typing import List

from ..repositories.store import DataStore
from ..schemas.base import RELATABLE_KINDS
from ..schemas.stix import StixObject, Technique

logger = logging.getLogger(__name__)

class RelationshipResolver:
    """Looks up the techniques a non-technique object relates to"""

    def __init__(self, store: DataStore):
        self.store = store

    def get_related(self, stix_object: StixObject, domain_version_id: str) -> List[Technique]:
        """
        Techniques and sub-techniques related to ``stix_object`` in a domain version.
        Only groups, software, mitigations and campaigns have relations; any
        other kind yields an empty list.
        """
        if stix_object.kind not in RELATABLE_KINDS:
            logger.warning(
                f"Cannot resolve related techniques for {stix_object.kind.value} {stix_object.id}"
            )
            return []

        related_ids = stix_object.related_techniques(domain_version_id)
        domain = self.store.get_domain(domain_version_id)
        return [t for t in domain.all_techniques() if t.id in related_ids]
