"""Projects file for multi-tenant deployments.

The file is a JSON document::

    {"projects": [{"name": "web", "token": "...", "data_file": "web.json"}]}
"""

import json
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, Field, ValidationError, field_validator


class ProjectsFileError(ValueError):
    """The projects file is missing, malformed or inconsistent"""


class ProjectEntry(BaseModel):
    """One tenant: a display name, its bearer token and its data file"""

    name: str = Field(..., description="Project name shown in listings")
    token: str = Field(..., description="Bearer token routing requests to this project")
    data_file: str = Field(..., description="Snapshot file, relative to the projects file")

    @field_validator("name", "token", "data_file")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class ProjectsFile(BaseModel):
    projects: List[ProjectEntry]


def validate_entries(entries: List[ProjectEntry]) -> List[ProjectEntry]:
    """Require at least one entry and unique names and tokens"""
    if not entries:
        raise ProjectsFileError("projects file lists no projects")
    names, tokens = set(), set()
    for entry in entries:
        if entry.name in names:
            raise ProjectsFileError(f"duplicate project name: {entry.name}")
        if entry.token in tokens:
            raise ProjectsFileError(f"duplicate token for project {entry.name}")
        names.add(entry.name)
        tokens.add(entry.token)
    return entries


def load_projects_file(path: Union[str, Path]) -> List[ProjectEntry]:
    """Read and validate the projects file at ``path``"""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ProjectsFileError(f"reading projects file {path}: {e}") from e

    try:
        document = ProjectsFile.model_validate_json(raw)
    except ValidationError as e:
        raise ProjectsFileError(f"parsing projects file {path}: {e}") from e
    return validate_entries(document.projects)


def resolve_data_file(entry: ProjectEntry, base_dir: Union[str, Path]) -> Path:
    """The entry's data file, with relative paths taken from ``base_dir``"""
    data_file = Path(entry.data_file)
    if not data_file.is_absolute():
        data_file = Path(base_dir) / data_file
    return data_file
