"""Validation modules for catalogs and format specifiers."""

from .catalog_validator import CatalogValidator, ensure_valid, validate_catalog
from .placeholder_validator import PlaceholderValidator

__all__ = ["CatalogValidator", "PlaceholderValidator", "ensure_valid", "validate_catalog"]
