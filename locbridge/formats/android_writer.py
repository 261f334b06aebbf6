"""Writer for Android strings.xml resources."""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional
from xml.sax.saxutils import escape

from ..models.catalog import Catalog, PlainTranslation, PluralTranslation, same_language
from ..validation.catalog_validator import ensure_valid
from ..validation.placeholder_validator import PlaceholderValidator
from .plural_rules import to_android_quantities

log = logging.getLogger(__name__)

XML_HEADER = '<?xml version="1.0" encoding="utf-8"?>'
INDENT = "    "

_INVALID_NAME_CHARS = re.compile(r"[^A-Za-z0-9_]")
_XML_ENTITIES = {"'": "&apos;", '"': "&quot;"}


def android_resource_dir(language: str, default_language: Optional[str] = None) -> str:
    """
    Resource directory for a language.

    ``values`` for the default language, ``values-fr``, ``values-pt-rBR``,
    and the BCP-47 form ``values-b+zh+Hans`` when a script is present.
    """
    if default_language and same_language(language, default_language):
        return "values"

    parts = language.replace("_", "-").split("-")
    lang = parts[0].lower()
    rest = parts[1:]
    if not rest:
        return f"values-{lang}"
    if len(rest) == 1 and len(rest[0]) == 2 and rest[0].isalpha():
        return f"values-{lang}-r{rest[0].upper()}"
    return "values-b+" + "+".join([lang] + rest)


def sanitize_resource_names(keys: Iterable[str]) -> Dict[str, str]:
    """
    Map every key to a valid, unique Android resource name.

    Invalid characters become "_", a leading digit gets a "_" prefix and
    collisions get "_2", "_3", ... suffixes in key order. Keys that are
    already valid names always keep them.
    """
    bases: Dict[str, str] = {}
    for key in keys:
        base = _INVALID_NAME_CHARS.sub("_", key) or "_"
        if base[0].isdigit():
            base = f"_{base}"
        bases[key] = base

    names: Dict[str, str] = {}
    taken = {key for key, base in bases.items() if key == base}
    for key, base in bases.items():
        if key == base:
            names[key] = key
            continue
        name = base
        counter = 2
        while name in taken:
            name = f"{base}_{counter}"
            counter += 1
        taken.add(name)
        names[key] = name
    return names


@dataclass
class AndroidResources:
    """Generated strings.xml documents plus the keys that had to be renamed."""

    files: Dict[str, str] = field(default_factory=dict)
    renamed_keys: Dict[str, str] = field(default_factory=dict)
    default_language: Optional[str] = None

    def __getitem__(self, language: str) -> str:
        return self.files[language]

    def __contains__(self, language: object) -> bool:
        return language in self.files

    def __len__(self) -> int:
        return len(self.files)

    def paths(self) -> Dict[str, str]:
        """Map ``values-xx/strings.xml`` paths to file content."""
        return {
            f"{android_resource_dir(language, self.default_language)}/strings.xml": xml
            for language, xml in self.files.items()
        }


class AndroidWriter:
    """Writer for Android string and plurals resources."""

    def __init__(self):
        self.placeholders = PlaceholderValidator()

    def escape_value(self, text: str) -> str:
        """
        Escape a value for an Android resource.

        Backslashes are doubled, stray "%" becomes "\\%" and Apple format
        specifiers are rewritten, line breaks become "\\n"/"\\t", a leading
        "@" or "?" is escaped, quotes get a backslash, and the XML special
        characters are entity-escaped.
        """
        text = text.replace("\\", "\\\\")
        text = self.placeholders.to_android(text)
        text = text.replace("\n", "\\n").replace("\t", "\\t")
        text = text.replace("'", "\\'").replace('"', '\\"')
        if text[:1] in ("@", "?"):
            text = "\\" + text
        return escape(text, _XML_ENTITIES)

    def generate(self, catalog: Catalog, languages: Optional[Iterable[str]] = None) -> AndroidResources:
        """Render one strings.xml per language."""
        ensure_valid(catalog)
        names = sanitize_resource_names(catalog.entries)
        renamed = {key: name for key, name in names.items() if key != name}
        for key, name in renamed.items():
            log.info("Renamed key %r to Android resource name %r", key, name)

        resources = AndroidResources(
            renamed_keys=renamed,
            default_language=catalog.source_language,
        )
        for language in languages or catalog.languages:
            xml = self.generate_single(catalog, language, names)
            if xml is not None:
                resources.files[language] = xml
        return resources

    def generate_single(
        self,
        catalog: Catalog,
        language: str,
        names: Optional[Dict[str, str]] = None,
    ) -> Optional[str]:
        """Render one language; None when it has no translations."""
        names = names or sanitize_resource_names(catalog.entries)
        lines: List[str] = []
        for entry, translation in catalog.translations_for(language):
            name = names[entry.key]
            if entry.comment:
                lines.append(f"{INDENT}<!-- {self._comment(entry.comment)} -->")
            if isinstance(translation, PluralTranslation):
                lines.append(f'{INDENT}<plurals name="{name}">')
                for quantity, value in to_android_quantities(translation.variants):
                    lines.append(
                        f'{INDENT * 2}<item quantity="{quantity}">{self.escape_value(value)}</item>'
                    )
                lines.append(f"{INDENT}</plurals>")
            elif isinstance(translation, PlainTranslation):
                lines.append(f'{INDENT}<string name="{name}">{self.escape_value(translation.value)}</string>')

        if not lines:
            return None
        body = "\n".join(lines)
        return f"{XML_HEADER}\n<resources>\n{body}\n</resources>\n"

    @staticmethod
    def _comment(comment: str) -> str:
        # "--" is not allowed inside XML comments
        text = " ".join(comment.split())
        while "--" in text:
            text = text.replace("--", "- -")
        return text


def generate_all_android_xml(
    catalog: Catalog,
    languages: Optional[Iterable[str]] = None,
) -> AndroidResources:
    """Render ``strings.xml`` content for every language of the catalog."""
    return AndroidWriter().generate(catalog, languages)
