"""Validator and converter for printf-style format specifiers."""

import re
from typing import List, Optional, Tuple
from dataclasses import dataclass

# %[positional$][flags][width][.precision][length]conversion
# No space flag: "50% off" is text, not "% o".
_SPECIFIER = (
    r"(?P<positional>\d+\$)?"
    r"(?P<flags>[-+0#]*)"
    r"(?P<width>\d+|\*)?"
    r"(?P<precision>\.(?:\d+|\*))?"
    r"(?P<length>hh|h|ll|l|L|q|z|j|t)?"
    r"(?P<conversion>[diouxXDOUeEfFgGaAcCsSp@])"
)

# Apple conversions that have no Java counterpart.
_JAVA_CONVERSIONS = {
    "@": "s",
    "i": "d",
    "u": "d",
    "D": "d",
    "U": "d",
    "O": "o",
    "C": "c",
    "S": "s",
    "p": "s",
}


@dataclass
class PlaceholderIssue:
    """Represents a placeholder validation issue."""

    error_type: str  # count_mismatch, missing, extra, order_changed
    message: str
    severity: str  # critical, warning


class PlaceholderValidator:
    """
    Validates and converts format specifiers in localized strings.

    Apple format specifiers include:
    - %@ - Object/string
    - %d, %ld, %lld - Integers
    - %f, %.2f - Floats
    - %% - Literal percent
    - %1$@, %2$lld - Positional specifiers
    """

    PLACEHOLDER_PATTERN = re.compile(r"%(?:" + _SPECIFIER + r"|%)")

    # Same as above, but a bare "%" matches too so it can be escaped.
    PERCENT_PATTERN = re.compile(r"%(?:" + _SPECIFIER + r"|(?P<literal>%))?")

    def validate(self, source: str, translation: str) -> Tuple[bool, List[PlaceholderIssue]]:
        """
        Validate that placeholders in source match those in translation.

        Args:
            source: Original source text
            translation: Translated text

        Returns:
            Tuple of (is_valid, list of issues)
        """
        issues = []

        source_placeholders = self._extract_placeholders(source)
        trans_placeholders = self._extract_placeholders(translation)

        if len(source_placeholders) != len(trans_placeholders):
            issues.append(
                PlaceholderIssue(
                    error_type="count_mismatch",
                    message=f"Placeholder count mismatch: source has {len(source_placeholders)}, "
                    f"translation has {len(trans_placeholders)}",
                    severity="critical",
                )
            )

        source_set = set(source_placeholders)
        trans_set = set(trans_placeholders)

        for placeholder in sorted(source_set - trans_set):
            issues.append(
                PlaceholderIssue(
                    error_type="missing",
                    message=f"Missing placeholder in translation: {placeholder}",
                    severity="critical",
                )
            )

        for placeholder in sorted(trans_set - source_set):
            issues.append(
                PlaceholderIssue(
                    error_type="extra",
                    message=f"Extra placeholder in translation: {placeholder}",
                    severity="critical",
                )
            )

        # Reordered non-positional placeholders still compile but swap arguments
        if not issues:
            source_non_positional = [p for p in source_placeholders if "$" not in p]
            trans_non_positional = [p for p in trans_placeholders if "$" not in p]

            if source_non_positional != trans_non_positional:
                if sorted(source_non_positional) == sorted(trans_non_positional):
                    issues.append(
                        PlaceholderIssue(
                            error_type="order_changed",
                            message="Non-positional placeholder order changed "
                            "(may cause runtime issues)",
                            severity="warning",
                        )
                    )

        is_valid = not any(issue.severity == "critical" for issue in issues)
        return is_valid, issues

    def _extract_placeholders(self, text: str) -> List[str]:
        """Extract all placeholders from text, ignoring literal %%."""
        return [
            match.group(0)
            for match in self.PLACEHOLDER_PATTERN.finditer(text)
            if match.group(0) != "%%"
        ]

    def format_value_type(self, text: str) -> Optional[str]:
        """
        Length modifier and conversion of the first placeholder ("d", "ld",
        "@"), as used by NSStringFormatValueTypeKey.
        """
        for match in self.PLACEHOLDER_PATTERN.finditer(text):
            if match.group("conversion"):
                return (match.group("length") or "") + match.group("conversion")
        return None

    def to_android(self, text: str) -> str:
        """
        Rewrite format specifiers for Android's Java formatter.

        Apple-only conversions are mapped (%@ -> %s, %ld -> %d) and every
        "%" that does not start a specifier becomes "\\%".
        """

        def convert(match: re.Match) -> str:
            if match.group("literal"):
                return "%%"
            conversion = match.group("conversion")
            if not conversion:
                return "\\%"
            return "%{}{}{}{}{}".format(
                match.group("positional") or "",
                match.group("flags") or "",
                match.group("width") or "",
                match.group("precision") or "",
                _JAVA_CONVERSIONS.get(conversion, conversion),
            )

        return self.PERCENT_PATTERN.sub(convert, text)
