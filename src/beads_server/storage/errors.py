"""Error kinds raised by the bead store"""

from typing import List


class BeadError(Exception):
    """Base class for store errors; ``kind`` and ``status_code`` drive the HTTP mapping"""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BeadError):
    """Missing id or unresolved prefix"""

    kind = "not_found"
    status_code = 404


class AmbiguousError(BeadError):
    """A prefix matched more than one bead"""

    kind = "ambiguous"
    status_code = 400

    def __init__(self, prefix: str, candidates: List[str]):
        self.prefix = prefix
        self.candidates = sorted(candidates)
        super().__init__(f"ambiguous prefix {prefix}: matches {', '.join(self.candidates)}")


class InvalidError(BeadError, ValueError):
    """Input shape or value violation"""

    kind = "invalid"
    status_code = 400


class ConflictError(BeadError):
    """The operation conflicts with the current state (claims, epics, nesting)"""

    kind = "conflict"
    status_code = 409


class PersistError(BeadError):
    """The snapshot could not be written; the in-memory change was rolled back"""

    kind = "persist"
    status_code = 500


class SnapshotError(Exception):
    """A snapshot file exists but cannot be read or parsed"""
