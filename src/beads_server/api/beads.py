"""Beads API endpoints: CRUD, claim and comments.

Handlers are plain ``def`` functions; FastAPI runs them in its thread pool
and the store serializes writes per tenant. Path ids accept unique prefixes.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends

from ..models import Bead, BeadDetail, ChangeResult
from ..storage.bead_store import BeadStore
from .deps import get_store
from .schemas import BeadChangeResponse, BeadCreate, BeadPatch, ClaimRequest, CommentCreate

router = APIRouter()


def resolve_ids(store: BeadStore, candidates: Optional[List[str]]) -> Optional[List[str]]:
    """Resolve a list of ids or prefixes to full ids"""
    if candidates is None:
        return None
    return [store.resolve(candidate).id for candidate in candidates if candidate]


def change_response(result: ChangeResult) -> BeadChangeResponse:
    return BeadChangeResponse(
        **result.bead.model_dump(),
        unblocked=result.unblocked or None,
    )


@router.post("/beads", response_model=Bead, status_code=201)
def create_bead(body: BeadCreate, store: BeadStore = Depends(get_store)):
    """Create a new bead, as a child of ``parent_id`` when one is given"""
    draft = body.to_draft(resolve_ids(store, body.blocked_by))
    if body.parent_id:
        parent = store.resolve(body.parent_id)
        return store.create_with_parent(draft, parent.id)
    return store.create(draft)


@router.get(
    "/beads/{bead_id}",
    response_model=BeadDetail,
    response_model_exclude_none=True,
)
def get_bead(bead_id: str, store: BeadStore = Depends(get_store)):
    """Get a bead with its epic progress or its parent's title"""
    return store.detail(store.resolve(bead_id).id)


@router.patch(
    "/beads/{bead_id}",
    response_model=BeadChangeResponse,
    response_model_exclude_none=True,
)
def update_bead(bead_id: str, body: BeadPatch, store: BeadStore = Depends(get_store)):
    """Update a bead.

    A ``parent_id`` in the body moves the bead into that epic (empty string
    moves it out); the move and the other fields succeed or fail together.
    """
    bead = store.resolve(bead_id)
    changes = body.to_update(resolve_ids(store, body.blocked_by))
    parent_id = None
    if body.moves:
        parent_id = store.resolve(body.parent_id).id if body.parent_id else ""
    return change_response(store.update(bead.id, changes, parent_id=parent_id))


@router.delete(
    "/beads/{bead_id}",
    response_model=BeadChangeResponse,
    response_model_exclude_none=True,
)
def delete_bead(bead_id: str, store: BeadStore = Depends(get_store)):
    """Soft-delete a bead"""
    return change_response(store.delete(store.resolve(bead_id).id))


@router.post("/beads/{bead_id}/claim", response_model=Bead)
def claim_bead(bead_id: str, body: ClaimRequest, store: BeadStore = Depends(get_store)):
    """Claim a bead: status in_progress, assignee the claiming user"""
    return store.claim(store.resolve(bead_id).id, body.user)


@router.post("/beads/{bead_id}/comments", response_model=Bead, status_code=201)
def add_comment(bead_id: str, body: CommentCreate, store: BeadStore = Depends(get_store)):
    """Add a comment to a bead"""
    return store.add_comment(store.resolve(bead_id).id, body.author, body.text)
