"""Writer for Apple's legacy .strings and .stringsdict files."""

import plistlib
from typing import Dict, Iterable, List, Optional

from ..models.catalog import Catalog, PlainTranslation, PluralTranslation
from ..validation.placeholder_validator import PlaceholderValidator
from .plural_rules import ordered_variants
from .strings_parser import PLURAL_RULE_TYPE

PLURAL_VARIABLE = "count"
DEFAULT_VALUE_TYPE = "d"


def escape_strings_value(text: str) -> str:
    """Escape a key or value for a double-quoted .strings literal."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def _escape_comment(comment: str) -> str:
    return comment.replace("*/", "* /")


class StringsWriter:
    """Writer for .strings/.stringsdict files, one pair per language."""

    def __init__(self, table_name: str = "Localizable"):
        self.table_name = table_name
        self.placeholders = PlaceholderValidator()

    def serialize_strings(self, catalog: Catalog, language: str) -> str:
        """
        Render the plain translations of one language as .strings text.

        Entries follow catalog order. Keys whose translation for this
        language is a plural are left to the .stringsdict file.
        """
        lines: List[str] = []
        for entry, translation in catalog.translations_for(language):
            if not isinstance(translation, PlainTranslation):
                continue
            if entry.comment:
                if lines:
                    lines.append("")
                lines.append(f"/* {_escape_comment(entry.comment)} */")
            lines.append(
                f'"{escape_strings_value(entry.key)}" = "{escape_strings_value(translation.value)}";'
            )
        return "\n".join(lines) + "\n" if lines else ""

    def serialize_stringsdict(self, catalog: Catalog, language: str) -> Optional[str]:
        """
        Render the plural translations of one language as a plist.

        Returns None when the language has no plural translation.
        """
        root: Dict[str, dict] = {}
        for entry, translation in catalog.translations_for(language):
            if not isinstance(translation, PluralTranslation):
                continue
            value_type = (
                self.placeholders.format_value_type(translation.other or "")
                or DEFAULT_VALUE_TYPE
            )
            rule = {
                "NSStringFormatSpecTypeKey": PLURAL_RULE_TYPE,
                "NSStringFormatValueTypeKey": value_type,
            }
            rule.update(ordered_variants(translation.variants))
            root[entry.key] = {
                "NSStringLocalizedFormatKey": f"%#@{PLURAL_VARIABLE}@",
                PLURAL_VARIABLE: rule,
            }

        if not root:
            return None
        return plistlib.dumps(root, sort_keys=False).decode("utf-8")

    def generate_all(
        self,
        catalog: Catalog,
        languages: Optional[Iterable[str]] = None,
    ) -> Dict[str, str]:
        """
        Render every language into ``xx.lproj/<table>.strings`` and
        ``xx.lproj/<table>.stringsdict`` contents.
        """
        files: Dict[str, str] = {}
        for language in languages or catalog.languages:
            strings = self.serialize_strings(catalog, language)
            if strings:
                files[f"{language}.lproj/{self.table_name}.strings"] = strings
            stringsdict = self.serialize_stringsdict(catalog, language)
            if stringsdict is not None:
                files[f"{language}.lproj/{self.table_name}.stringsdict"] = stringsdict
        return files


def serialize_strings_file(catalog: Catalog, language: str) -> str:
    return StringsWriter().serialize_strings(catalog, language)


def serialize_strings_dict(catalog: Catalog, language: str) -> Optional[str]:
    return StringsWriter().serialize_stringsdict(catalog, language)


def generate_all_strings_files(
    catalog: Catalog,
    languages: Optional[Iterable[str]] = None,
    table_name: str = "Localizable",
) -> Dict[str, str]:
    """Map ``xx.lproj/Localizable.strings(dict)`` paths to file content."""
    return StringsWriter(table_name=table_name).generate_all(catalog, languages)
