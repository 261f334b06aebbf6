"""Mapping between Apple plural categories and Android quantity strings.

Both platforms use the ICU category names. The difference is in what they
require: Android needs ``other`` and falls back to it at runtime, a String
Catalog needs every authored category spelled out. Choosing a category for
a given count is left to the target platform.
"""

from typing import Dict, Iterable, List, Mapping, Tuple

from ..errors import FormatError, ValidationError
from ..models.catalog import PLURAL_CATEGORIES


def variant_problems(variants: Mapping[str, str]) -> List[str]:
    """Describe what makes a variants mapping invalid."""
    problems = [
        f"unknown plural category '{category}'"
        for category in variants
        if category not in PLURAL_CATEGORIES
    ]
    if "other" not in variants:
        problems.append("plural variants must define 'other'")
    return problems


def ordered_variants(variants: Mapping[str, str]) -> List[Tuple[str, str]]:
    """Present categories in the fixed order zero, one, two, few, many, other."""
    return [
        (category, variants[category])
        for category in PLURAL_CATEGORIES
        if category in variants
    ]


def to_android_quantities(variants: Mapping[str, str]) -> List[Tuple[str, str]]:
    """
    Convert plural variants into Android ``<item quantity>`` pairs.

    Only authored categories are emitted; ``other`` is always present and
    always last.
    """
    problems = variant_problems(variants)
    if problems:
        raise ValidationError("Invalid plural variants: " + "; ".join(problems))
    return ordered_variants(variants)


def from_android_quantities(quantities: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """Inverse of to_android_quantities."""
    variants: Dict[str, str] = {}
    for quantity, value in quantities:
        if quantity not in PLURAL_CATEGORIES:
            raise FormatError(f"Unknown quantity '{quantity}'")
        if quantity in variants:
            raise FormatError(f"Duplicate quantity '{quantity}'")
        variants[quantity] = value

    if "other" not in variants:
        raise FormatError("Plural quantities must include 'other'")
    return dict(ordered_variants(variants))
