"""Read queries: list (flat and hierarchical), search and the detail view"""

from typing import Optional

from ..models import (
    Bead,
    BeadDetail,
    BeadSummary,
    ChildSummary,
    ListFilters,
    ListResult,
    Progress,
    Status,
)
from ..models.base import DEFAULT_LIST_STATUSES
from .graph import (
    BeadMap,
    children_of,
    epic_ids,
    has_active_blocker,
    normalize_paging,
    paginate,
    require,
    sort_beads,
    total_pages,
)


def _with_parent_context(beads: BeadMap, bead: Bead, summary: BeadSummary) -> BeadSummary:
    if bead.parent_id:
        summary.parent_id = bead.parent_id
        parent = beads.get(bead.parent_id)
        if parent is not None:
            summary.parent_title = parent.title
    return summary


def _page_result(items, page: int, per_page: int, to_summary) -> ListResult:
    return ListResult(
        beads=[to_summary(bead) for bead in paginate(items, page, per_page)],
        page=page,
        per_page=per_page,
        total=len(items),
        total_pages=total_pages(len(items), per_page),
    )


class QueryOps:
    """Query operations of BeadStore"""

    def list(self, filters: Optional[ListFilters] = None) -> ListResult:
        """List beads matching ``filters``, sorted and paginated.

        Ready and assignee-filtered listings are flat lists of leaf beads
        with parent context (an agent's work queue). Everything else is
        hierarchical: top-level beads only, each epic carrying its children.
        """
        filters = filters or ListFilters()
        page, per_page = normalize_paging(filters.page, filters.per_page)

        if filters.ready:
            statuses = {Status.OPEN}
        elif filters.all:
            statuses = set()
        elif filters.statuses:
            statuses = {Status(s) for s in filters.statuses}
        else:
            statuses = set(DEFAULT_LIST_STATUSES)

        with self._reading() as beads:
            if filters.ready or filters.assignee is not None:
                return self._list_flat(beads, filters, statuses, page, per_page)
            return self._list_hierarchical(beads, filters, statuses, page, per_page)

    @staticmethod
    def _matches(beads: BeadMap, bead: Bead, statuses, filters: ListFilters) -> bool:
        if statuses and bead.status not in statuses:
            return False
        if filters.priority is not None and bead.priority != filters.priority:
            return False
        if filters.type is not None and bead.type != filters.type:
            return False
        if filters.assignee is not None and bead.assignee != filters.assignee:
            return False
        if filters.tags and not set(filters.tags) & set(bead.tags):
            return False
        if filters.ready and has_active_blocker(beads, bead):
            return False
        return True

    def _list_flat(self, beads: BeadMap, filters, statuses, page, per_page) -> ListResult:
        epics = epic_ids(beads)
        matched = sort_beads(
            bead
            for bead in beads.values()
            if bead.id not in epics and self._matches(beads, bead, statuses, filters)
        )
        return _page_result(
            matched, page, per_page,
            lambda bead: _with_parent_context(beads, bead, BeadSummary.from_bead(bead)),
        )

    def _list_hierarchical(self, beads: BeadMap, filters, statuses, page, per_page) -> ListResult:
        top_level = sort_beads(
            bead
            for bead in beads.values()
            if not bead.parent_id and self._matches(beads, bead, statuses, filters)
        )

        def to_summary(bead: Bead) -> BeadSummary:
            summary = BeadSummary.from_bead(bead)
            children = children_of(beads, bead.id)
            if children:
                summary.is_epic = True
                summary.children = [
                    BeadSummary.from_bead(child)
                    for child in sort_beads(children)
                    if child.status != Status.DELETED
                ]
            return summary

        return _page_result(top_level, page, per_page, to_summary)

    def search(self, query: str, page: int = 1, per_page: int = 100) -> ListResult:
        """Case-insensitive substring search over title and description of non-deleted beads"""
        page, per_page = normalize_paging(page, per_page)
        needle = query.lower()

        with self._reading() as beads:
            epics = epic_ids(beads)
            matched = sort_beads(
                bead
                for bead in beads.values()
                if bead.status != Status.DELETED
                and (needle in bead.title.lower() or needle in bead.description.lower())
            )

            def to_summary(bead: Bead) -> BeadSummary:
                summary = _with_parent_context(beads, bead, BeadSummary.from_bead(bead))
                if bead.id in epics:
                    summary.is_epic = True
                return summary

            return _page_result(matched, page, per_page, to_summary)

    def detail(self, bead_id: str) -> BeadDetail:
        """The bead with epic progress and child summaries, or its parent's title"""
        with self._reading() as beads:
            bead = require(beads, bead_id)
            detail = BeadDetail(**bead.model_dump())

            children = children_of(beads, bead_id)
            if children:
                progress = Progress(total=len(children))
                for child in children:
                    field = child.status.value
                    setattr(progress, field, getattr(progress, field) + 1)
                detail = detail.model_copy(update={
                    "is_epic": True,
                    "progress": progress,
                    "children": [
                        ChildSummary(
                            id=child.id,
                            title=child.title,
                            status=child.status,
                            priority=child.priority,
                            type=child.type,
                            assignee=child.assignee,
                        )
                        for child in sort_beads(children)
                    ],
                })

            if bead.parent_id and bead.parent_id in beads:
                detail = detail.model_copy(update={"parent_title": beads[bead.parent_id].title})
            return detail
