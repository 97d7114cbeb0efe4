"""
Data store interface and in-memory implementation
"""

import logging
from typing import Dict, Iterable, List, Protocol

from ..exceptions import NotFoundError
from ..schemas.stix import Domain

logger = logging.getLogger(__name__)

class DataStore(Protocol):
    """Anything that can hand out a domain snapshot per domain version"""

    def get_domain(self, domain_version_id: str) -> Domain:
        ...

class InMemoryDataStore:
    """Holds already-built domains keyed by domain version"""

    def __init__(self, domains: Iterable[Domain] = ()):
        self._domains: Dict[str, Domain] = {}
        for domain in domains:
            self.add_domain(domain)

    def add_domain(self, domain: Domain) -> None:
        if domain.domain_version_id in self._domains:
            logger.info(f"Replacing domain version {domain.domain_version_id}")
        self._domains[domain.domain_version_id] = domain

    def get_domain(self, domain_version_id: str) -> Domain:
        try:
            return self._domains[domain_version_id]
        except KeyError:
            raise NotFoundError(f"Domain version not loaded: {domain_version_id}") from None

    def domain_version_ids(self) -> List[str]:
        return list(self._domains)
