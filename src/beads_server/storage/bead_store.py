"""In-memory bead store persisted as a JSON snapshot.

One BeadStore serves one tenant. Reads run under the shared side of the
store's readers-writer lock; every mutation runs inside ``_transaction``,
which holds the exclusive side across validation, mutation, derived-state
recomputation and the snapshot write, and restores the previous state if
any of those steps raises.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from ..models import (
    Bead,
    BeadDraft,
    BeadType,
    BeadUpdate,
    ChangeResult,
    Comment,
    Priority,
    Status,
    utc_now,
)
from ..models.base import CREATE_STATUSES
from .cleanup import CleanupOps
from .dependencies import DependencyOps
from .epics import EpicOps
from .errors import ConflictError, InvalidError, PersistError
from .graph import children_of, compute_unblocked, dedupe, has_children, require
from .id_generator import generate_bead_id, resolve_prefix
from .locking import RWLock
from .queries import QueryOps
from .snapshot import load_snapshot, save_snapshot

logger = logging.getLogger(__name__)


class Transaction:
    """The bead map as seen by one write operation"""

    def __init__(self, beads: Dict[str, Bead]):
        self.beads = beads
        self.changed = False

    def put(self, bead: Bead) -> Bead:
        self.beads[bead.id] = bead
        self.changed = True
        return bead

    def remove(self, bead_id: str) -> Bead:
        self.changed = True
        return self.beads.pop(bead_id)


class BeadStore(DependencyOps, EpicOps, QueryOps, CleanupOps):
    """Authoritative state of one tenant's beads"""

    def __init__(self, path: Union[str, Path], beads: Iterable[Bead] = ()):
        self.path = Path(path)
        self._beads: Dict[str, Bead] = {bead.id: bead for bead in beads}
        self._lock = RWLock()

    @classmethod
    def load(cls, path: Union[str, Path]) -> "BeadStore":
        """Load the snapshot at ``path``; a missing file gives an empty store"""
        store = cls(path, load_snapshot(path))
        logger.info("Loaded %d beads from %s", len(store._beads), path)
        return store

    def __len__(self):
        with self._lock.read_locked():
            return len(self._beads)

    @contextmanager
    def _reading(self) -> Iterator[Dict[str, Bead]]:
        with self._lock.read_locked():
            yield self._beads

    @contextmanager
    def _transaction(self) -> Iterator[Transaction]:
        with self._lock.write_locked():
            backup = dict(self._beads)
            tx = Transaction(self._beads)
            try:
                yield tx
                if tx.changed:
                    save_snapshot(self.path, self._beads.values())
            except PersistError as e:
                logger.error("Failed to persist %s, rolling back: %s", self.path, e)
                self._restore(backup)
                raise
            except Exception:
                self._restore(backup)
                raise

    def _restore(self, backup: Dict[str, Bead]):
        self._beads.clear()
        self._beads.update(backup)

    # -- reads ---------------------------------------------------------------

    def get(self, bead_id: str) -> Bead:
        """Get bead by exact ID"""
        with self._reading() as beads:
            return require(beads, bead_id)

    def resolve(self, prefix: str) -> Bead:
        """Get bead by exact ID or unique prefix, with or without ``bd-``"""
        with self._reading() as beads:
            return beads[resolve_prefix(prefix, beads.keys())]

    def all(self) -> List[Bead]:
        with self._reading() as beads:
            return list(beads.values())

    # -- writes --------------------------------------------------------------

    def create(self, draft: BeadDraft) -> Bead:
        """Create a bead from ``draft``; the store assigns its id"""
        with self._transaction() as tx:
            bead = self._insert(tx, draft)
        logger.debug("Created bead %s", bead.id)
        return bead

    def _insert(self, tx: Transaction, draft: BeadDraft, parent_id: str = "") -> Bead:
        if not draft.title or not draft.title.strip():
            raise InvalidError("title is required")
        status = Status(draft.status)
        if status not in CREATE_STATUSES:
            raise InvalidError("status at creation must be 'open' or 'not_ready'")

        bead_id = generate_bead_id(lambda candidate: candidate in tx.beads)
        blocked_by = dedupe(draft.blocked_by)
        for blocker_id in blocked_by:
            self._check_link_target(tx.beads, bead_id, blocker_id)

        now = utc_now()
        bead = tx.put(Bead(
            id=bead_id,
            title=draft.title,
            description=draft.description,
            status=status,
            priority=draft.priority,
            type=draft.type,
            tags=dedupe(draft.tags),
            blocked_by=blocked_by,
            assignee=draft.assignee,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        ))
        for blocker_id in blocked_by:
            self._check_link_shape(tx.beads, bead_id, blocker_id)
        return bead

    def update(self, bead_id: str, changes: BeadUpdate, parent_id: Optional[str] = None) -> ChangeResult:
        """Apply a partial update.

        Status is derived for epics and cannot be set on them. A status
        change on a child recomputes its parent; a terminal status reports
        the beads it unblocked. A ``parent_id`` moves the bead into that
        epic (empty string moves it out) before the fields are applied,
        in the same transaction.
        """
        with self._transaction() as tx:
            if parent_id is not None:
                moved = self._move_into(tx, bead_id, parent_id) if parent_id else self._move_out(tx, bead_id)
                if changes.is_empty():
                    return ChangeResult(bead=moved)
            return self._apply_update(tx, bead_id, changes)

    def _apply_update(self, tx: Transaction, bead_id: str, changes: BeadUpdate) -> ChangeResult:
        bead = require(tx.beads, bead_id)
        fields = {}

        if changes.title is not None:
            if not changes.title.strip():
                raise InvalidError("title must not be empty")
            fields["title"] = changes.title
        if changes.description is not None:
            fields["description"] = changes.description
        if changes.priority is not None:
            fields["priority"] = Priority(changes.priority)
        if changes.type is not None:
            fields["type"] = BeadType(changes.type)
        if changes.assignee is not None:
            fields["assignee"] = changes.assignee
        if changes.status is not None:
            if has_children(tx.beads, bead_id):
                raise ConflictError("cannot set status on an epic; status is derived from children")
            fields["status"] = Status(changes.status)

        tags = self._apply_tag_changes(bead.tags, changes)
        if tags is not None:
            fields["tags"] = tags

        added_blockers = []
        if changes.blocked_by is not None:
            blocked_by = dedupe(changes.blocked_by)
            added_blockers = [i for i in blocked_by if i not in bead.blocked_by]
            for blocker_id in added_blockers:
                self._check_link_target(tx.beads, bead_id, blocker_id)
            fields["blocked_by"] = blocked_by

        updated = tx.put(bead.touched(**fields))
        for blocker_id in added_blockers:
            self._check_link_shape(tx.beads, bead_id, blocker_id)

        if "status" in fields and bead.parent_id:
            self._recompute_epic(tx, bead.parent_id)

        unblocked = []
        if updated.status.is_terminal and "status" in fields:
            unblocked = compute_unblocked(tx.beads, bead_id)
        return ChangeResult(bead=updated, unblocked=unblocked)

    @staticmethod
    def _apply_tag_changes(current: List[str], changes: BeadUpdate):
        if changes.tags is None and not changes.add_tags and not changes.remove_tags:
            return None
        tags = dedupe(changes.tags) if changes.tags is not None else list(current)
        if changes.add_tags:
            tags = dedupe(tags + list(changes.add_tags))
        if changes.remove_tags:
            removed = set(changes.remove_tags)
            tags = [tag for tag in tags if tag not in removed]
        return tags

    def delete(self, bead_id: str) -> ChangeResult:
        """Soft-delete a bead by setting its status to deleted"""
        with self._transaction() as tx:
            bead = require(tx.beads, bead_id)
            if any(not child.status.is_terminal for child in children_of(tx.beads, bead_id)):
                raise ConflictError("cannot delete epic with open children; close or delete children first")

            deleted = tx.put(bead.touched(status=Status.DELETED))
            if bead.parent_id:
                self._recompute_epic(tx, bead.parent_id)
            unblocked = compute_unblocked(tx.beads, bead_id)
        logger.debug("Deleted bead %s (%d unblocked)", bead_id, len(unblocked))
        return ChangeResult(bead=deleted, unblocked=unblocked)

    def claim(self, bead_id: str, user: str) -> Bead:
        """Atomically set status in_progress and assignee to ``user``.

        Idempotent for the user already holding the claim.
        """
        if not user or not user.strip():
            raise InvalidError("user is required")

        with self._transaction() as tx:
            bead = require(tx.beads, bead_id)
            if bead.status.is_terminal:
                raise ConflictError(f"bead {bead_id} is {bead.status.value} and cannot be claimed")
            if bead.status == Status.NOT_READY:
                raise ConflictError(f"bead {bead_id} is not_ready and cannot be claimed")
            if has_children(tx.beads, bead_id):
                raise ConflictError("cannot claim an epic; claim individual children")
            if bead.assignee and bead.assignee != user:
                raise ConflictError(f"bead {bead_id} is already claimed by {bead.assignee}")
            if bead.status == Status.IN_PROGRESS and bead.assignee == user:
                return bead

            claimed = tx.put(bead.touched(status=Status.IN_PROGRESS, assignee=user))
            if bead.parent_id:
                self._recompute_epic(tx, bead.parent_id)
        return claimed

    def add_comment(self, bead_id: str, author: str, text: str) -> Bead:
        """Append a comment and advance the bead's updated_at"""
        if not author or not author.strip():
            raise InvalidError("author is required")
        if not text or not text.strip():
            raise InvalidError("text is required")

        with self._transaction() as tx:
            bead = require(tx.beads, bead_id)
            comment = Comment(author=author, text=text, created_at=utc_now())
            return tx.put(bead.touched(comments=[*bead.comments, comment]))
