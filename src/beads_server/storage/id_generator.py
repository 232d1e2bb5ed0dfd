"""Bead ID generation with collision detection, and prefix resolution"""

import os
import string
from typing import Callable, Iterable

from ..models import ID_PREFIX
from .errors import AmbiguousError, NotFoundError, PersistError

# Lowercase letters and digits for readability
ID_ALPHABET = string.ascii_lowercase + string.digits
MIN_SUFFIX_LENGTH = 4
MAX_SUFFIX_LENGTH = 8
ATTEMPTS_PER_LENGTH = 10


def generate_random_string(length: int = MIN_SUFFIX_LENGTH) -> str:
    """Generate random alphanumeric string from ``length`` random bytes"""
    return "".join(ID_ALPHABET[b % len(ID_ALPHABET)] for b in os.urandom(length))


def generate_bead_id(exists: Callable[[str], bool], prefix: str = ID_PREFIX) -> str:
    """Generate a bead ID not accepted by ``exists``.

    Starts with a 4 character suffix and widens it one character at a time,
    up to 8, whenever every attempt at the current width collides.
    """
    for length in range(MIN_SUFFIX_LENGTH, MAX_SUFFIX_LENGTH + 1):
        for _ in range(ATTEMPTS_PER_LENGTH):
            candidate_id = f"{prefix}{generate_random_string(length)}"
            if not exists(candidate_id):
                return candidate_id
    raise PersistError("could not generate a unique bead id")


def normalize_prefix(candidate: str, prefix: str = ID_PREFIX) -> str:
    """Prepend the id prefix if the caller left it off"""
    if candidate.startswith(prefix):
        return candidate
    return prefix + candidate


def resolve_prefix(candidate: str, ids: Iterable[str], prefix: str = ID_PREFIX) -> str:
    """Resolve a full id or unique prefix against ``ids``.

    Raises NotFoundError when nothing matches and AmbiguousError when more
    than one id shares the prefix.
    """
    wanted = normalize_prefix(candidate.strip(), prefix)
    ids = list(ids)
    if wanted in ids:
        return wanted

    matches = [bead_id for bead_id in ids if bead_id.startswith(wanted)]
    if not matches:
        raise NotFoundError(f"bead {wanted} not found")
    if len(matches) > 1:
        raise AmbiguousError(wanted, matches)
    return matches[0]
