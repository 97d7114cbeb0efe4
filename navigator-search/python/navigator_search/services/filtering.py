"""
Filtering and sorting of STIX object collections and data component labels
"""

import locale
import unicodedata
from typing import List, Sequence, Tuple, TypeVar

from ..schemas.search import SearchField
from ..schemas.stix import StixObject

T = TypeVar('T', bound=StixObject)

def collation_key(text: str) -> Tuple[str, str]:
    """
    Sort key that orders names alphabetically regardless of case and accents.

    Text is case-folded and stripped of combining marks before going through
    ``locale.strxfrm``, so "apple" sorts before "Zebra" and "Élan" before
    "Zeta" even in the C locale. The raw text breaks ties between variants.
    """
    folded = unicodedata.normalize('NFKD', text.casefold())
    base = ''.join(c for c in folded if not unicodedata.combining(c))
    return locale.strxfrm(base), text

def _matches(item: StixObject, fields: Sequence[SearchField], query: str) -> bool:
    for field in fields:
        if not field.enabled:
            continue
        # Missing or non-text attributes never match
        value = getattr(item, field.field, None)
        if isinstance(value, str) and query in value.lower():
            return True
    return False

def filter_and_sort(
    items: Sequence[T],
    query: str = "",
    *,
    fields: Sequence[SearchField],
    sort_hierarchy: bool = False
) -> List[T]:
    """
    Filter a collection by status and query, or sort it when the query is empty.

    Deprecated and revoked objects are always dropped. With an empty query the
    remaining objects are sorted by name; with ``sort_hierarchy`` sub-techniques
    sort under their parent's name. With a query, objects are kept in their
    input order when any enabled field contains it, and each ID is kept once.
    """
    results = [item for item in items if not item.deprecated and not item.revoked]

    needle = query.strip().lower()
    if not needle:
        if sort_hierarchy:
            results.sort(key=lambda t: collation_key(t.display_name))
        else:
            results.sort(key=lambda item: collation_key(item.name))
        return results

    # Deconflict IDs for techniques appearing under several tactics
    seen_ids = set()
    filtered = []
    for item in results:
        if item.id in seen_ids:
            continue
        if _matches(item, fields, needle):
            seen_ids.add(item.id)
            filtered.append(item)
    return filtered

def filter_and_sort_labels(labels: Sequence[str], query: str) -> List[str]:
    """Sort labels for an empty query, otherwise keep the matching ones in order"""
    needle = query.strip().lower()
    if not needle:
        return sorted(labels, key=collation_key)
    return [label for label in labels if needle in label.lower()]
