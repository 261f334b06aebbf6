"""Catalog-wide validation: model invariants plus placeholder consistency."""

from typing import List

from ..errors import ValidationError
from ..models.catalog import (
    Catalog,
    PlainTranslation,
    PluralTranslation,
    ValidationIssue,
    validate,
)
from .placeholder_validator import PlaceholderValidator


class CatalogValidator:
    """
    Validates a Catalog.

    Invariant violations (bad plural categories, missing 'other', broken
    language codes) are errors. Placeholder differences between the source
    value and a translation are warnings.
    """

    def __init__(self, check_placeholders: bool = True):
        self.check_placeholders = check_placeholders
        self.placeholders = PlaceholderValidator()

    def validate(self, catalog: Catalog) -> List[ValidationIssue]:
        issues = validate(catalog)
        if self.check_placeholders:
            issues.extend(self._placeholder_issues(catalog))
        return issues

    def _placeholder_issues(self, catalog: Catalog) -> List[ValidationIssue]:
        issues = []
        for key, entry in catalog.entries.items():
            source = catalog.get_source_value(key)
            for language, translation in entry.translations.items():
                if catalog.is_source_language(language):
                    continue
                if isinstance(translation, PlainTranslation):
                    values = [translation.value]
                elif isinstance(translation, PluralTranslation):
                    # Variants like "one" often spell the number out
                    values = [translation.other or ""]
                else:
                    continue

                for value in values:
                    if not value:
                        continue
                    _, found = self.placeholders.validate(source, value)
                    for issue in found:
                        issues.append(ValidationIssue(
                            code=f"placeholder_{issue.error_type}",
                            message=issue.message,
                            severity="warning",
                            key=key,
                            language=language,
                        ))
        return issues


def validate_catalog(catalog: Catalog, check_placeholders: bool = True) -> List[ValidationIssue]:
    """Return every finding for the catalog; never raises."""
    return CatalogValidator(check_placeholders=check_placeholders).validate(catalog)


def ensure_valid(catalog: Catalog) -> None:
    """Raise ValidationError when the catalog breaks an invariant."""
    errors = [issue for issue in validate(catalog) if issue.severity == "error"]
    if errors:
        raise ValidationError(
            f"Catalog has {len(errors)} invalid entr{'y' if len(errors) == 1 else 'ies'}",
            errors,
        )
