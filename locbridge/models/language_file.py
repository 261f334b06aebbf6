"""Input file model for legacy per-language resources."""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath

STRINGS_EXTENSION = ".strings"
STRINGSDICT_EXTENSION = ".stringsdict"

_LPROJ_PATTERN = re.compile(r"(?:^|/)([a-z]{2,3}(?:[-_][a-z0-9]+)*)\.lproj(?:/|$)")
_BARE_CODE_PATTERN = re.compile(r"^[a-z]{2,3}(?:[-_][a-z0-9]+)*$")
_EXTENSION_PATTERN = re.compile(r"\.(strings|stringsdict|xml)$")


@dataclass(frozen=True)
class LanguageFile:
    """An already-read resource file and the language it holds."""

    name: str
    content: str
    lang_code: str

    @property
    def is_stringsdict(self) -> bool:
        return self.name.lower().endswith(STRINGSDICT_EXTENSION)

    @property
    def is_strings(self) -> bool:
        return self.name.lower().endswith(STRINGS_EXTENSION)

    @property
    def kind(self) -> str:
        """'stringsdict', 'strings' or '' for anything else."""
        if self.is_stringsdict:
            return "stringsdict"
        if self.is_strings:
            return "strings"
        return ""


def guess_language_code(file_name: str) -> str:
    """
    Guess a language code from a file name or path.

    Matches ``xx.lproj``/``xx-YY.lproj`` anywhere in the path, or a bare
    ``xx``/``xx-YY`` file stem. Returns an empty string when nothing fits.
    """
    name = file_name.replace("\\", "/").lower()
    name = _EXTENSION_PATTERN.sub("", name)

    match = _LPROJ_PATTERN.search(name)
    if match:
        return match.group(1)

    stem = PurePosixPath(name).name
    match = _BARE_CODE_PATTERN.match(stem)
    if match:
        return match.group(0)
    return ""
