"""Dependencies API endpoints: link, unlink and deps"""

from fastapi import APIRouter, Depends

from ..models import Bead, DepsResult
from ..storage.bead_store import BeadStore
from ..storage.errors import InvalidError
from .deps import get_store
from .schemas import LinkRequest

router = APIRouter()


@router.post("/beads/{bead_id}/link", response_model=Bead)
def link_bead(bead_id: str, body: LinkRequest, store: BeadStore = Depends(get_store)):
    """Mark a bead as blocked by another"""
    bead = store.resolve(bead_id)
    if not body.blocked_by.strip():
        raise InvalidError("blocked_by is required")
    blocker = store.resolve(body.blocked_by)
    return store.link(bead.id, blocker.id)


@router.delete("/beads/{bead_id}/link/{other_id}", response_model=Bead)
def unlink_bead(bead_id: str, other_id: str, store: BeadStore = Depends(get_store)):
    """Remove a blocked_by edge"""
    bead = store.resolve(bead_id)
    other = store.resolve(other_id)
    return store.unlink(bead.id, other.id)


@router.get("/beads/{bead_id}/deps", response_model=DepsResult)
def get_deps(bead_id: str, store: BeadStore = Depends(get_store)):
    """Active blockers, resolved blockers and the beads this one blocks"""
    return store.deps(store.resolve(bead_id).id)
