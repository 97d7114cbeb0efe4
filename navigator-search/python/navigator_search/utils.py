"""
Utility functions for reading STIX objects
"""

import logging
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

def get_external_id(stix_obj: Dict[str, Any], source_names: Iterable[str]) -> Optional[str]:
    """External ID from the first reference whose source is one of ``source_names``"""
    sources = set(source_names)
    for ref in stix_obj.get('external_references', []):
        if ref.get('source_name') in sources and ref.get('external_id'):
            return ref['external_id']
    return None

def get_external_url(stix_obj: Dict[str, Any]) -> Optional[str]:
    """URL of the first external reference carrying one"""
    for ref in stix_obj.get('external_references', []):
        if ref.get('url'):
            return ref['url']
    return None

def is_deprecated(stix_obj: Dict[str, Any]) -> bool:
    return bool(stix_obj.get('x_mitre_deprecated', False))

def is_revoked(stix_obj: Dict[str, Any]) -> bool:
    return bool(stix_obj.get('revoked', False))

def join_data_sources(stix_obj: Dict[str, Any]) -> str:
    """Technique data sources as one searchable string"""
    return ", ".join(stix_obj.get('x_mitre_data_sources', []) or [])
