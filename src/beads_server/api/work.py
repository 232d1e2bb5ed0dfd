"""Work queue endpoints: list, search and clean"""

from datetime import timedelta
from enum import Enum
from typing import List, Optional, Type

from fastapi import APIRouter, Body, Depends, Query

from ..models import BeadType, ListFilters, ListResult, Priority, Status, utc_now
from ..storage.bead_store import BeadStore
from ..storage.errors import InvalidError
from .deps import get_store
from .schemas import CleanRequest, CleanResponse

router = APIRouter()

DEFAULT_CLEAN_DAYS = 5.0


def split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_enum(enum_cls: Type[Enum], value: Optional[str]):
    """The enum member for ``value``, or None when it is missing or unknown"""
    if not value:
        return None
    try:
        return enum_cls(value.strip())
    except ValueError:
        return None


def parse_page(value: Optional[str], default: int) -> int:
    try:
        number = int(value) if value else default
    except ValueError:
        return default
    return number if number >= 1 else default


@router.get("/beads", response_model=ListResult, response_model_exclude_none=True)
def list_beads(
    all: Optional[str] = Query(None, description="'true' disables the status filter"),
    ready: Optional[str] = Query(None, description="'true' lists open beads with no active blocker"),
    status: Optional[str] = Query(None, description="Comma-separated statuses"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    type: Optional[str] = Query(None, description="Filter by bead type"),
    tag: Optional[str] = Query(None, description="Comma-separated tags (any matches)"),
    assignee: Optional[str] = Query(None, description="Filter by assignee"),
    page: Optional[str] = Query(None, description="Page number, from 1"),
    per_page: Optional[str] = Query(None, description="Page size"),
    store: BeadStore = Depends(get_store),
):
    """List beads; unknown filter values are ignored"""
    filters = ListFilters(
        statuses=[s for s in (parse_enum(Status, v) for v in split_csv(status)) if s is not None],
        priority=parse_enum(Priority, priority),
        type=parse_enum(BeadType, type),
        tags=split_csv(tag),
        assignee=assignee or None,
        all=all == "true",
        ready=ready == "true",
        page=parse_page(page, 1),
        per_page=parse_page(per_page, 100),
    )
    return store.list(filters)


@router.get("/search", response_model=ListResult, response_model_exclude_none=True)
def search_beads(
    q: Optional[str] = Query(None, description="Substring to look for in title and description"),
    page: Optional[str] = Query(None),
    per_page: Optional[str] = Query(None),
    store: BeadStore = Depends(get_store),
):
    """Case-insensitive substring search"""
    if not q:
        raise InvalidError("q parameter is required")
    return store.search(q, parse_page(page, 1), parse_page(per_page, 100))


@router.post("/clean", response_model=CleanResponse)
def clean_beads(
    body: Optional[CleanRequest] = Body(None),
    store: BeadStore = Depends(get_store),
):
    """Hard-remove terminal beads untouched for ``days`` days"""
    days = DEFAULT_CLEAN_DAYS
    if body is not None and body.days is not None:
        if body.days < 0:
            raise InvalidError("days must be non-negative")
        days = body.days
    cutoff = utc_now() - timedelta(days=days)
    return CleanResponse(removed=store.clean(cutoff))
