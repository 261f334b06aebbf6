"""Project storage for String Catalogs kept between API calls."""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, asdict

from ...config import config

log = logging.getLogger(__name__)

PROJECT_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]{0,127}$")


@dataclass
class ProjectMetadata:
    """Metadata for a stored project."""
    project_id: str
    source_language: str
    languages: List[str]
    key_count: int
    updated_at: str

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectMetadata":
        return cls(**data)


class ProjectStorage:
    """Stores one .xcstrings document per project id in a directory."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir or config.storage_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def is_valid_id(project_id: str) -> bool:
        return bool(PROJECT_ID_PATTERN.match(project_id)) and ".." not in project_id

    def save(
        self,
        project_id: str,
        content: str,
        source_language: str,
        languages: List[str],
        key_count: int,
    ) -> ProjectMetadata:
        """
        Save catalog content under a project id, replacing any previous one.

        Args:
            project_id: Caller chosen id (letters, digits, '.', '_' and '-')
            content: Serialized .xcstrings document
            source_language: Source language of the catalog
            languages: Languages present in the catalog
            key_count: Number of keys in the catalog

        Returns:
            ProjectMetadata for the stored project
        """
        if not self.is_valid_id(project_id):
            raise ValueError(f"Invalid project id: {project_id!r}")

        self._get_content_path(project_id).write_text(content, encoding="utf-8")

        metadata = ProjectMetadata(
            project_id=project_id,
            source_language=source_language,
            languages=list(languages),
            key_count=key_count,
            updated_at=datetime.now().isoformat(),
        )
        self._get_meta_path(project_id).write_text(json.dumps(metadata.to_dict()))
        log.debug("Saved project %s (%d keys)", project_id, key_count)

        return metadata

    def get_content(self, project_id: str) -> Optional[str]:
        """Get stored catalog content by project id."""
        if not self.is_valid_id(project_id):
            return None
        content_path = self._get_content_path(project_id)
        if not content_path.exists():
            return None
        return content_path.read_text(encoding="utf-8")

    def get_metadata(self, project_id: str) -> Optional[ProjectMetadata]:
        """Get project metadata by id."""
        if not self.is_valid_id(project_id):
            return None
        meta_path = self._get_meta_path(project_id)
        if not meta_path.exists():
            return None
        return ProjectMetadata.from_dict(json.loads(meta_path.read_text()))

    def delete(self, project_id: str) -> bool:
        """Delete a project by id."""
        if not self.is_valid_id(project_id):
            return False

        deleted = False
        for path in (self._get_content_path(project_id), self._get_meta_path(project_id)):
            if path.exists():
                path.unlink()
                deleted = True

        return deleted

    def list_projects(self) -> List[ProjectMetadata]:
        """List all stored projects, most recently updated first."""
        projects = []
        for meta_file in self.base_dir.glob("*.meta"):
            try:
                projects.append(ProjectMetadata.from_dict(json.loads(meta_file.read_text())))
            except (json.JSONDecodeError, TypeError) as e:
                log.warning("Skipping unreadable project metadata %s: %s", meta_file.name, e)

        projects.sort(key=lambda p: p.updated_at, reverse=True)
        return projects

    def _get_content_path(self, project_id: str) -> Path:
        return self.base_dir / f"{project_id}.xcstrings"

    def _get_meta_path(self, project_id: str) -> Path:
        return self.base_dir / f"{project_id}.meta"
