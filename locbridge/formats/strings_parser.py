"""Parser for Apple's legacy .strings and .stringsdict files."""

import logging
import plistlib
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from xml.parsers.expat import ExpatError

from ..errors import FormatError
from ..models.catalog import (
    PLURAL_CATEGORIES,
    PlainTranslation,
    PluralTranslation,
    Translation,
    TranslationState,
    normalize_language_code,
)
from .plural_rules import ordered_variants

log = logging.getLogger(__name__)

PLURAL_RULE_TYPE = "NSStringPluralRuleType"

# Unquoted tokens allowed by the old-style plist syntax.
_BARE_TOKEN_CHARS = re.compile(r"[A-Za-z0-9_$+/:.\-]")

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "'": "'",
    "\\": "\\",
    "0": "\0",
}


@dataclass
class ParsedStrings:
    """Translations read from one legacy file, plus the comments found above keys."""

    language: str
    translations: Dict[str, Translation] = field(default_factory=dict)
    comments: Dict[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.translations)


class _LineError(Exception):
    def __init__(self, message: str, line: int, resume: Optional[tuple] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.resume = resume


def _starts_token(char: str) -> bool:
    return char == '"' or bool(char and _BARE_TOKEN_CHARS.match(char))


class _Scanner:
    """Character cursor that keeps track of the 1-based line number."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        self.line = 1

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def startswith(self, prefix: str) -> bool:
        return self.text.startswith(prefix, self.pos)

    def advance(self) -> str:
        char = self.text[self.pos]
        self.pos += 1
        if char == "\n":
            self.line += 1
        return char

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.peek().isspace():
            self.advance()

    def skip_to_line_end(self) -> None:
        while not self.at_end() and self.peek() != "\n":
            self.advance()

    def mark(self) -> tuple:
        return self.pos, self.line

    def reset(self, mark: tuple) -> None:
        self.pos, self.line = mark


class StringsParser:
    """Parser for .strings (key/value) and .stringsdict (plural plist) content."""

    def parse_strings(self, content: str, language: str) -> ParsedStrings:
        """
        Parse .strings content.

        Every malformed line is recorded; a single FormatError listing all
        of them is raised at the end.

        Args:
            content: Raw text of the .strings file
            language: Language code the file holds

        Returns:
            ParsedStrings with plain translations and captured comments
        """
        language = normalize_language_code(language)
        result = ParsedStrings(language=language)
        errors: List[FormatError] = []

        scanner = _Scanner(content.lstrip("\ufeff"))
        pending_comment: Optional[str] = None
        pending_comment_end = 0
        pending_is_line_comment = False
        last_key: Optional[str] = None
        last_entry_end = 0

        while True:
            scanner.skip_whitespace()
            if scanner.at_end():
                break

            if scanner.startswith("/*"):
                start_line = scanner.line
                text = self._read_block_comment(scanner)
                if text is None:
                    errors.append(FormatError("Unterminated comment", line=start_line))
                    break
                if start_line == last_entry_end:
                    self._attach_trailing_comment(result, last_key, text)
                    continue
                pending_comment = text
                pending_comment_end = scanner.line
                pending_is_line_comment = False
                continue

            if scanner.startswith("//"):
                line = scanner.line
                text = self._read_line_comment(scanner)
                if line == last_entry_end:
                    self._attach_trailing_comment(result, last_key, text)
                    continue
                if pending_is_line_comment and pending_comment is not None and pending_comment_end == line - 1:
                    pending_comment = f"{pending_comment}\n{text}"
                else:
                    pending_comment = text
                pending_comment_end = line
                pending_is_line_comment = True
                continue

            entry_line = scanner.line
            try:
                key, value = self._read_entry(scanner)
            except _LineError as e:
                errors.append(FormatError(e.message, line=e.line))
                if e.resume is not None:
                    scanner.reset(e.resume)
                else:
                    scanner.skip_to_line_end()
                pending_comment = None
                continue

            if key in result.translations:
                log.debug("Duplicate key %r on line %d, keeping the later value", key, entry_line)
            result.translations[key] = PlainTranslation(value=value, state=TranslationState.TRANSLATED)
            if pending_comment is not None and pending_comment_end >= entry_line - 1:
                result.comments[key] = pending_comment
            pending_comment = None
            last_key = key
            last_entry_end = scanner.line

        if errors:
            raise FormatError.aggregate(errors, language=language)

        log.debug("Parsed %d strings for %s", len(result), language)
        return result

    def parse_stringsdict(self, content: str, language: str) -> ParsedStrings:
        """
        Parse .stringsdict content.

        Each top-level key must contain exactly one NSStringPluralRuleType
        rule, and that rule must define 'other'.
        """
        language = normalize_language_code(language)
        try:
            data = plistlib.loads(content.encode("utf-8"))
        except ExpatError as e:
            raise FormatError(
                f"Invalid .stringsdict plist: {e}", line=e.lineno, language=language
            ) from e
        except (plistlib.InvalidFileException, ValueError) as e:
            raise FormatError(f"Invalid .stringsdict plist: {e}", language=language) from e

        if not isinstance(data, dict):
            raise FormatError("A .stringsdict file must contain a dictionary", language=language)

        result = ParsedStrings(language=language)
        errors: List[FormatError] = []
        for key, spec in data.items():
            try:
                variants = self._plural_variants(spec)
            except FormatError as e:
                errors.append(e.with_context(key=key))
                continue
            result.translations[key] = PluralTranslation(variants=variants)

        if errors:
            raise FormatError.aggregate(errors, language=language)

        log.debug("Parsed %d plural strings for %s", len(result), language)
        return result

    def _plural_variants(self, spec: Any) -> Dict[str, str]:
        if not isinstance(spec, dict):
            raise FormatError("Entry must be a dictionary")

        rules = {
            name: value for name, value in spec.items()
            if isinstance(value, dict) and value.get("NSStringFormatSpecTypeKey") == PLURAL_RULE_TYPE
        }
        if not rules:
            raise FormatError(f"No {PLURAL_RULE_TYPE} rule found")
        if len(rules) > 1:
            raise FormatError("Multiple plural variables in one key are not supported")

        variable, rule = next(iter(rules.items()))
        variants: Dict[str, str] = {}
        for category, value in rule.items():
            if category.startswith("NSString"):
                continue
            if category not in PLURAL_CATEGORIES:
                raise FormatError(f"Unknown plural category '{category}'")
            if not isinstance(value, str):
                raise FormatError(f"Plural category '{category}' must be a string")
            variants[category] = value

        if "other" not in variants:
            raise FormatError("Plural rule is missing 'other'")

        # "You have %#@items@" -> each variant becomes the full sentence
        format_key = spec.get("NSStringLocalizedFormatKey")
        if isinstance(format_key, str):
            reference = re.compile(r"%(?:\d+\$)?#@" + re.escape(variable) + "@")
            match = reference.search(format_key)
            if match and match.group(0) != format_key:
                prefix, suffix = format_key[:match.start()], format_key[match.end():]
                variants = {
                    category: f"{prefix}{value}{suffix}" for category, value in variants.items()
                }

        return dict(ordered_variants(variants))

    def _read_entry(self, scanner: _Scanner) -> tuple:
        """
        Read one ``key = value;`` entry.

        Errors are reported on the line the entry starts on. When a broken
        entry runs onto later lines, parsing resumes at the first token that
        starts one of those lines.
        """
        entry_line = scanner.line
        resume = None
        try:
            key = self._read_token(scanner, "key")
            resume = self._skip_gap_within(scanner, entry_line, resume)
            if scanner.peek() != "=":
                raise _LineError(f"Expected '=' after key '{key}'", entry_line, resume)
            scanner.advance()
            resume = self._skip_gap_within(scanner, entry_line, resume)
            value = self._read_token(scanner, "value")

            resume = self._skip_gap_within(scanner, entry_line, resume)
            if scanner.peek() != ";":
                raise _LineError(f"Missing ';' after value for key '{key}'", entry_line, resume)
        except _LineError as e:
            e.line = entry_line
            raise
        scanner.advance()
        return key, value

    def _skip_gap_within(
        self,
        scanner: _Scanner,
        entry_line: int,
        resume: Optional[tuple],
    ) -> Optional[tuple]:
        """Skip a gap inside an entry, remembering the first token on a later line."""
        self._skip_gap(scanner)
        if resume is None and scanner.line > entry_line and _starts_token(scanner.peek()):
            return scanner.mark()
        return resume

    def _attach_trailing_comment(
        self,
        result: ParsedStrings,
        key: Optional[str],
        text: str,
    ) -> None:
        """A comment after an entry on the same line describes that entry."""
        if key is not None and key not in result.comments and text:
            result.comments[key] = text

    def _skip_gap(self, scanner: _Scanner) -> None:
        """Skip whitespace and comments between the parts of one entry."""
        while True:
            scanner.skip_whitespace()
            if scanner.startswith("/*"):
                start_line = scanner.line
                if self._read_block_comment(scanner) is None:
                    raise _LineError("Unterminated comment", start_line)
            elif scanner.startswith("//"):
                self._read_line_comment(scanner)
            else:
                return

    def _read_token(self, scanner: _Scanner, what: str) -> str:
        char = scanner.peek()
        if char == '"':
            return self._read_quoted(scanner)
        if char and _BARE_TOKEN_CHARS.match(char):
            start = scanner.pos
            while scanner.peek() and _BARE_TOKEN_CHARS.match(scanner.peek()):
                scanner.advance()
            return scanner.text[start:scanner.pos]
        if not char:
            raise _LineError(f"Unexpected end of file, expected {what}", scanner.line)
        raise _LineError(f"Unexpected character {char!r}, expected {what}", scanner.line)

    def _read_quoted(self, scanner: _Scanner) -> str:
        start_line = scanner.line
        scanner.advance()  # opening quote
        chars: List[str] = []
        while True:
            char = scanner.peek()
            if not char or char == "\n":
                raise _LineError("Unterminated string", start_line)
            scanner.advance()
            if char == '"':
                return "".join(chars)
            if char != "\\":
                chars.append(char)
                continue

            escaped = scanner.peek()
            if not escaped or escaped == "\n":
                raise _LineError("Unterminated string", start_line)
            scanner.advance()
            if escaped in ("u", "U"):
                chars.append(self._read_unicode_escape(scanner, start_line))
            else:
                chars.append(_SIMPLE_ESCAPES.get(escaped, escaped))

    def _read_unicode_escape(self, scanner: _Scanner, line: int) -> str:
        code = self._read_hex4(scanner, line)
        # Surrogate pairs arrive as two consecutive escapes
        if 0xD800 <= code <= 0xDBFF and scanner.peek() == "\\" and scanner.peek(1) in ("u", "U"):
            mark = scanner.mark()
            scanner.advance()
            scanner.advance()
            low = self._read_hex4(scanner, line)
            if 0xDC00 <= low <= 0xDFFF:
                return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00))
            scanner.reset(mark)
        return chr(code)

    def _read_hex4(self, scanner: _Scanner, line: int) -> int:
        digits = scanner.text[scanner.pos:scanner.pos + 4]
        if len(digits) != 4 or not all(c in "0123456789abcdefABCDEF" for c in digits):
            raise _LineError("Invalid unicode escape", line)
        for _ in range(4):
            scanner.advance()
        return int(digits, 16)

    def _read_block_comment(self, scanner: _Scanner) -> Optional[str]:
        end = scanner.text.find("*/", scanner.pos + 2)
        if end == -1:
            while not scanner.at_end():
                scanner.advance()
            return None
        body = scanner.text[scanner.pos + 2:end]
        while scanner.pos < end + 2:
            scanner.advance()
        lines = [line.strip().lstrip("*").strip() for line in body.strip().splitlines()]
        return "\n".join(line for line in lines if line)

    def _read_line_comment(self, scanner: _Scanner) -> str:
        start = scanner.pos + 2
        scanner.skip_to_line_end()
        return scanner.text[start:scanner.pos].strip()


def parse_strings_file(content: str, language: str) -> ParsedStrings:
    """Parse .strings text for one language."""
    return StringsParser().parse_strings(content, language)


def parse_strings_dict(content: str, language: str) -> ParsedStrings:
    """Parse .stringsdict plist XML for one language."""
    return StringsParser().parse_stringsdict(content, language)
