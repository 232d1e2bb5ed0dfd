"""Tenant registries: map a bearer token to exactly one bead store"""

import hmac
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .projects import ProjectEntry, resolve_data_file, validate_entries
from .storage.bead_store import BeadStore

logger = logging.getLogger(__name__)

DEFAULT_PROJECT = "default"


@dataclass(frozen=True)
class ProjectInfo:
    """A project as shown to presentation layers; never carries its token"""

    name: str
    store: BeadStore


def _token_matches(candidate: str, token: str) -> bool:
    return hmac.compare_digest(candidate.encode("utf-8"), token.encode("utf-8"))


class SingleTenantRegistry:
    """One fixed token routing to one store"""

    def __init__(self, token: str, store: BeadStore, name: str = DEFAULT_PROJECT):
        if not token:
            raise ValueError("token must not be empty")
        self._token = token
        self._project = ProjectInfo(name=name, store=store)

    def resolve(self, token: str) -> Optional[BeadStore]:
        if token and _token_matches(token, self._token):
            return self._project.store
        return None

    def projects(self) -> List[ProjectInfo]:
        return [self._project]


class MultiTenantRegistry:
    """Several projects, each with its own token and store"""

    def __init__(self, entries: Iterable[Tuple[str, str, BeadStore]]):
        # (name, token, store) triples; copied so later changes to the input are not seen
        self._entries: List[Tuple[str, str, BeadStore]] = []
        names, tokens = set(), set()
        for name, token, store in entries:
            if not name or not token:
                raise ValueError("project name and token must not be empty")
            if name in names:
                raise ValueError(f"duplicate project name: {name}")
            if token in tokens:
                raise ValueError(f"duplicate token for project {name}")
            names.add(name)
            tokens.add(token)
            self._entries.append((name, token, store))

    def resolve(self, token: str) -> Optional[BeadStore]:
        if not token:
            return None
        found = None
        # no early exit: every entry is compared
        for _, candidate, store in self._entries:
            if _token_matches(token, candidate):
                found = store
        return found

    def projects(self) -> List[ProjectInfo]:
        return [ProjectInfo(name=name, store=store) for name, _, store in self._entries]


def build_multi_tenant_registry(
    entries: List[ProjectEntry], base_dir: Union[str, Path] = "."
) -> MultiTenantRegistry:
    """Load one store per projects-file entry"""
    validate_entries(entries)
    loaded: Dict[str, Tuple[str, str, BeadStore]] = {}
    for entry in entries:
        store = BeadStore.load(resolve_data_file(entry, base_dir))
        loaded[entry.name] = (entry.name, entry.token, store)
    logger.info("Serving %d projects: %s", len(loaded), ", ".join(loaded))
    return MultiTenantRegistry(loaded.values())
