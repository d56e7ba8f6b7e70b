"""Query building for owner-scoped patent search.

Everything is composed from SQLAlchemy expressions so user input only ever
reaches the database as bound parameters.
"""
import math
from typing import Tuple
from uuid import UUID

from sqlalchemy import Select, func, or_, select

from src.exceptions import BadInput
from src.patents.models import Patent, patent_jurisdictions
from src.patents.schemas import PatentSearch

SORTABLE_FIELDS = {
    "created_at": Patent.created_at,
    "updated_at": Patent.updated_at,
    "title": Patent.title,
    "status": Patent.status,
    "uniqueness_score": Patent.uniqueness_score,
    "market_potential": Patent.market_potential,
}


def build_conditions(owner_id: UUID, filters: PatentSearch) -> list:
    conditions = [Patent.owner_id == owner_id]

    if filters.query:
        conditions.append(or_(
            Patent.title.icontains(filters.query, autoescape=True),
            Patent.description.icontains(filters.query, autoescape=True),
        ))
    if filters.technical_field:
        conditions.append(Patent.technical_field.icontains(filters.technical_field, autoescape=True))
    if filters.jurisdictions:
        conditions.append(Patent.id.in_(
            select(patent_jurisdictions.c.patent_id)
            .where(patent_jurisdictions.c.jurisdiction.in_(filters.jurisdictions))
        ))
    if filters.status:
        conditions.append(Patent.status.in_(filters.status))
    if filters.date_from is not None:
        conditions.append(Patent.created_at >= filters.date_from)
    if filters.date_to is not None:
        conditions.append(Patent.created_at <= filters.date_to)
    return conditions


def build_search_statements(owner_id: UUID, filters: PatentSearch) -> Tuple[Select, Select]:
    """Return (page query, count query) for the given filters."""
    column = SORTABLE_FIELDS.get(filters.sort_by)
    if column is None:
        raise BadInput(
            f"Cannot sort by {filters.sort_by!r}. Valid fields: {', '.join(SORTABLE_FIELDS)}"
        )
    order = column.asc() if filters.sort_direction == "asc" else column.desc()

    conditions = build_conditions(owner_id, filters)
    items = (
        select(Patent)
        .where(*conditions)
        .order_by(order, Patent.created_at.asc(), Patent.id.asc())
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
    )
    count = select(func.count()).select_from(Patent).where(*conditions)
    return items, count


def total_pages(total_count: int, limit: int) -> int:
    return math.ceil(total_count / limit) if total_count else 0
