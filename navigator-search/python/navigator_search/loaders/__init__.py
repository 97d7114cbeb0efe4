"""
Loaders that turn external STIX data into Domain snapshots
"""

from .stix_bundle import StixBundleLoader

__all__ = ['StixBundleLoader']
