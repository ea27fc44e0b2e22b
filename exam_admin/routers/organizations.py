from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, exists, select
from sqlalchemy.orm import Session

from exam_admin.database import get_db
from exam_admin.models import Exam, Organization, Question
from exam_admin.models.organization import utcnow
from exam_admin.schemas.organization import OrganizationIn
from exam_admin.utils.field_mapper import (
    ORGANIZATION_FIELDS,
    apply_values,
    organization_to_wire,
    to_storage,
)
from exam_admin.utils.pagination import (
    PaginationMode,
    create_pagination_response,
    get_pagination_mode,
    paginate,
    parse_pagination,
)
from exam_admin.utils.query import apply_sort, text_search
from exam_admin.utils.responses import (
    ConflictError,
    NotFoundError,
    create_response,
    database_errors,
)
from exam_admin.utils.validators import validate_organization

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/organizations", tags=["Organizations"])

SEARCH_COLUMNS = (Organization.name, Organization.description, Organization.organization_code)


def _get_or_404(db: Session, organization_id: str) -> Organization:
    with database_errors("Failed to load organization"):
        org = db.get(Organization, organization_id)
    if not org:
        raise NotFoundError("Organization not found")
    return org


@router.get("")
def list_organizations(
    page: Optional[str] = None,
    page_size: Optional[str] = Query(None, alias="pageSize"),
    search: Optional[str] = None,
    status: Optional[str] = None,
    region: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    db: Session = Depends(get_db),
    mode: PaginationMode = Depends(get_pagination_mode),
):
    req = parse_pagination(page, page_size)
    logger.debug("list organizations page=%s size=%s search=%r region=%r status=%r",
                 req.page, req.page_size, search, region, status)

    stmt = select(Organization)
    if search:
        stmt = stmt.where(text_search(SEARCH_COLUMNS, search))
    if region:
        stmt = stmt.where(Organization.region == region)
    if status:
        stmt = stmt.where(Organization.status == status)
    stmt = apply_sort(stmt, Organization, ORGANIZATION_FIELDS, sort_by, sort_order)

    with database_errors("Failed to list organizations"):
        rows, pagination = paginate(db, stmt, req, mode)

    items = [organization_to_wire(org) for (org,) in rows]
    return create_response(create_pagination_response(items, pagination))


@router.post("")
def create_organization(payload: OrganizationIn, db: Session = Depends(get_db)):
    body = payload.wire()
    validate_organization(body)

    now = utcnow()
    org = Organization(id=str(uuid4()), created_at=now, updated_at=now,
                       **to_storage(ORGANIZATION_FIELDS, body))
    with database_errors("Failed to create organization"):
        db.add(org)
        db.commit()
        db.refresh(org)

    logger.info("Organization created: %s (%s)", org.id, org.organization_code)
    return create_response(organization_to_wire(org), "Organization created", 201)


@router.get("/{organization_id}")
def get_organization(organization_id: str, db: Session = Depends(get_db)):
    return create_response(organization_to_wire(_get_or_404(db, organization_id)))


def _update(db: Session, organization_id: str, body: dict) -> Organization:
    org = _get_or_404(db, organization_id)
    apply_values(org, to_storage(ORGANIZATION_FIELDS, body, partial=True))
    org.updated_at = utcnow()
    with database_errors("Failed to update organization"):
        db.commit()
        db.refresh(org)
    return org


@router.put("/{organization_id}")
def replace_organization(organization_id: str, payload: OrganizationIn, db: Session = Depends(get_db)):
    body = payload.wire()
    validate_organization(body)
    org = _update(db, organization_id, body)
    return create_response(organization_to_wire(org), "Organization updated")


@router.patch("/{organization_id}")
def patch_organization(organization_id: str, payload: OrganizationIn, db: Session = Depends(get_db)):
    org = _update(db, organization_id, payload.wire())
    return create_response(organization_to_wire(org), "Organization updated")


@router.delete("/{organization_id}")
def delete_organization(organization_id: str, db: Session = Depends(get_db)):
    """
    Deletes the organization unless an exam or question still references it.
    Guard and delete are one statement, so a concurrent insert cannot slip in between.
    Deleting an id that does not exist is a no-op and still succeeds.
    """
    stmt = (
        delete(Organization)
        .where(
            Organization.id == organization_id,
            ~exists().where(Exam.organization_id == organization_id),
            ~exists().where(Question.organization_id == organization_id),
        )
        .execution_options(synchronize_session=False)
    )
    with database_errors("Failed to delete organization"):
        result = db.execute(stmt)
        if not result.rowcount and db.get(Organization, organization_id) is not None:
            db.rollback()
            raise ConflictError("Cannot delete organization: exams still reference it")
        db.commit()

    logger.info("Organization deleted: %s (%d rows)", organization_id, result.rowcount)
    return create_response(None, "Organization deleted")
