"""FastAPI router for organizations and the active organization.

This module provides endpoints for:
- POST /orgs - Create the caller's organization
- GET /orgs - Organizations the caller belongs to
- POST /orgs/active - Switch the active organization
- GET /orgs/active - The active organization and the caller's role
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from ..audit.service import log_from_request
from ..auth.cookies import ORG_COOKIE, set_org_cookie
from ..auth.dependencies import CurrentUser
from ..database import get_db
from ..dependencies import ActiveOrg, require_active_org
from ..models.org import Org
from ..observability.logging_config import get_logger
from ..observability.metrics import orgs_created_total
from .schemas import (
    ActiveOrgResponse,
    OrgCreateRequest,
    OrgCreateResponse,
    OrgListResponse,
    OrgSummary,
    SetActiveOrgRequest,
)
from .service import (
    OrgError,
    create_organization,
    get_org_role,
    list_memberships,
    resolve_active_org,
    set_active_org,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/orgs", tags=["Organizations"])

NO_ACCESS_DETAIL = "You don't have access to that organization."


@router.post("", response_model=OrgCreateResponse, status_code=status.HTTP_201_CREATED)
def create_org(
    body: OrgCreateRequest,
    request: Request,
    response: Response,
    current_user: CurrentUser,
    db: Session = Depends(get_db),
) -> OrgCreateResponse:
    """Create an organization owned by the caller.

    A user may only create an organization while they belong to none.
    The new organization becomes the active one.

    Raises:
        HTTPException 400: If the name is shorter than two characters
        HTTPException 409: If the caller already belongs to an organization
    """
    try:
        org = create_organization(db, current_user, body.name)
    except OrgError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    log_from_request(
        db=db,
        request=request,
        org_id=org.id,
        action="ORG_CREATED",
        actor_id=current_user.id,
        entity_type="org",
        entity_id=org.id,
        metadata={"name": org.name, "slug": org.slug},
    )
    db.commit()

    orgs_created_total.inc()
    logger.info("Organization created", extra={"org_id": str(org.id), "slug": org.slug})

    set_org_cookie(response, org.id)
    return OrgCreateResponse(id=org.id)


@router.get("", response_model=OrgListResponse)
def list_orgs(
    request: Request,
    current_user: CurrentUser,
    db: Session = Depends(get_db),
) -> OrgListResponse:
    """List the caller's organizations with their role, flagging the active one."""
    memberships = list_memberships(db, current_user.id)
    resolved = resolve_active_org(db, current_user.id, request.cookies.get(ORG_COOKIE))
    active_id = resolved.org_id if resolved else None

    orgs = {o.id: o for o in db.query(Org).filter(Org.id.in_([m.org_id for m in memberships])).all()}
    return OrgListResponse(
        orgs=[
            OrgSummary(
                id=m.org_id,
                name=orgs[m.org_id].name,
                slug=orgs[m.org_id].slug,
                role=m.role,
                is_active=m.org_id == active_id,
            )
            for m in memberships
            if m.org_id in orgs
        ]
    )


@router.post("/active", response_model=ActiveOrgResponse)
def set_active(
    body: SetActiveOrgRequest,
    request: Request,
    response: Response,
    current_user: CurrentUser,
    db: Session = Depends(get_db),
) -> ActiveOrgResponse:
    """Switch the caller's active organization.

    Raises:
        HTTPException 400: If no organization was given
        HTTPException 403: If the caller is not a member of it
    """
    raw = (body.org_id or "").strip()
    if not raw:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Select an organization.")

    try:
        org_id = UUID(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NO_ACCESS_DETAIL)

    role = get_org_role(db, org_id, current_user.id)
    org = db.get(Org, org_id) if role else None
    if org is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NO_ACCESS_DETAIL)

    set_active_org(db, current_user.id, org.id)
    log_from_request(
        db=db,
        request=request,
        org_id=org.id,
        action="ACTIVE_ORG_CHANGED",
        actor_id=current_user.id,
        entity_type="org",
        entity_id=org.id,
    )
    db.commit()

    set_org_cookie(response, org.id)
    return ActiveOrgResponse(id=org.id, name=org.name, slug=org.slug, role=role)


@router.get("/active", response_model=ActiveOrgResponse)
def get_active(active: ActiveOrg = Depends(require_active_org)) -> ActiveOrgResponse:
    """Return the active organization and the caller's role in it."""
    return ActiveOrgResponse(
        id=active.org.id,
        name=active.org.name,
        slug=active.org.slug,
        role=active.role,
    )
