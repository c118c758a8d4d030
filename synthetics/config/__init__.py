"""
Configuration package.

Environment settings and the per-chain token/market catalog.
"""

from synthetics.config.config import Settings
from synthetics.config.tokens import TokenCatalog, load_catalog_overrides

__all__ = [
    "Settings",
    "TokenCatalog",
    "load_catalog_overrides",
]
