"""Error taxonomy for the conversion engine."""

from typing import Iterable, List, Optional


class LocalizationError(Exception):
    """Base class for every error raised by locbridge."""

    def details_list(self) -> List[str]:
        """Flat list of human readable problems, used by the CLI and the API."""
        return [str(self)]


class FormatError(LocalizationError):
    """
    Malformed input in a specific file, line or key.

    A FormatError can carry nested ``details`` when a parser collected
    several problems in one pass.
    """

    def __init__(
        self,
        message: str,
        *,
        file_name: Optional[str] = None,
        line: Optional[int] = None,
        key: Optional[str] = None,
        language: Optional[str] = None,
        details: Optional[Iterable["FormatError"]] = None,
    ):
        self.message = message
        self.file_name = file_name
        self.line = line
        self.key = key
        self.language = language
        self.details: List[FormatError] = list(details or [])
        super().__init__(self._render())

    @classmethod
    def aggregate(
        cls,
        errors: Iterable["FormatError"],
        file_name: Optional[str] = None,
        language: Optional[str] = None,
    ) -> "FormatError":
        """Combine collected errors into a single raisable error."""
        errors = list(errors)
        if not errors:
            raise ValueError("aggregate() needs at least one error")
        if len(errors) == 1:
            return errors[0].with_context(file_name=file_name, language=language)
        error = cls(
            f"{len(errors)} problems found",
            file_name=file_name,
            language=language,
            details=errors,
        )
        return error.with_context(file_name=file_name, language=language)

    def with_context(
        self,
        file_name: Optional[str] = None,
        language: Optional[str] = None,
        key: Optional[str] = None,
    ) -> "FormatError":
        """Fill in missing location fields and return the same error."""
        if file_name and not self.file_name:
            self.file_name = file_name
        if language and not self.language:
            self.language = language
        if key is not None and self.key is None and not self.details:
            self.key = key
        for detail in self.details:
            detail.with_context(file_name=file_name, language=language, key=key)
        self.args = (self._render(),)
        return self

    @property
    def location(self) -> str:
        parts = []
        if self.file_name:
            parts.append(self.file_name)
        if self.line is not None:
            parts.append(str(self.line))
        location = ":".join(parts)
        if self.key is not None:
            location = f"{location} [{self.key}]" if location else f"[{self.key}]"
        if self.language and not self.file_name:
            location = f"({self.language}) {location}".strip()
        return location

    def details_list(self) -> List[str]:
        if not self.details:
            return [self._render_single()]
        lines = []
        for detail in self.details:
            lines.extend(detail.details_list())
        return lines

    def _render_single(self) -> str:
        location = self.location
        return f"{location}: {self.message}" if location else self.message

    def _render(self) -> str:
        if not self.details:
            return self._render_single()
        lines = [self._render_single()]
        lines.extend(f"  - {line}" for line in self.details_list())
        return "\n".join(lines)


class ValidationError(LocalizationError):
    """A structure violates a catalog invariant (e.g. plural without 'other')."""

    def __init__(self, message: str, issues: Optional[list] = None):
        self.message = message
        self.issues = list(issues or [])
        super().__init__(message)

    def details_list(self) -> List[str]:
        if not self.issues:
            return [self.message]
        return [str(issue) for issue in self.issues]


class EmptyInputError(LocalizationError):
    """Nothing to merge."""

    def __init__(self, message: str = "No files to process."):
        super().__init__(message)


class AmbiguousLanguageError(LocalizationError):
    """Two inputs resolve to the same language (strict mode only)."""

    def __init__(self, language: str, file_names: List[str]):
        self.language = language
        self.file_names = list(file_names)
        super().__init__(
            f"Language '{language}' is provided by more than one file: "
            + ", ".join(self.file_names)
        )


class UnresolvedConflictError(LocalizationError):
    """Merged String Catalogs disagree on keys nobody chose a version for (strict mode only)."""

    def __init__(self, keys: List[str]):
        self.keys = list(keys)
        super().__init__(
            f"{len(self.keys)} conflicting keys need a resolution: " + ", ".join(self.keys)
        )

    def details_list(self) -> List[str]:
        return [f"No resolution for conflicting key '{key}'" for key in self.keys]


class ConflictError(LocalizationError):
    """A strict upsert would overwrite an existing, different translation."""

    def __init__(self, key: str, language: str):
        self.key = key
        self.language = language
        super().__init__(
            f"Translation for '{key}' in '{language}' already exists with a different value"
        )
