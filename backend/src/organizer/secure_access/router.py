"""Secure access endpoints: vendor credential directory and activity log.

Any member of the active organization may use these endpoints. Listings
never include passwords; the clear text is only returned by the reveal and
copy endpoints, and both leave an activity event behind.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import ActiveOrg, require_active_org
from ..models.secure_access import Vendor
from ..observability.logging_config import get_logger
from ..observability.metrics import vendor_events_total
from .schemas import (
    PasswordResponse,
    VendorActivityListResponse,
    VendorActivityResponse,
    VendorCreate,
    VendorDetail,
    VendorListResponse,
    VendorSummary,
    VendorUpdate,
    VendorUpdateResponse,
)
from .service import (
    ACTION_COPIED,
    ACTION_CREATED,
    ACTION_DELETED,
    ACTION_REVEALED,
    ACTION_UPDATED,
    VendorNotFoundError,
    VendorValidationError,
    create_vendor,
    delete_vendor,
    disclose_password,
    get_vendor,
    list_activity,
    list_vendors,
    mask_password,
    read_password,
    update_vendor,
    website_domain,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/secure-access", tags=["Secure Access"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found.")


def _summary_fields(vendor: Vendor) -> dict:
    return {
        "id": vendor.id,
        "name": vendor.name,
        "website": vendor.website,
        "website_domain": website_domain(vendor.website),
        "account_number": vendor.account_number,
        "contact_phone": vendor.contact_phone,
        "contact_email": vendor.contact_email,
        "last_updated_at": vendor.last_updated_at,
        "last_updated_by": vendor.last_updated_by,
        "created_at": vendor.created_at,
    }


def _detail(vendor: Vendor) -> VendorDetail:
    return VendorDetail(**_summary_fields(vendor), masked_password=mask_password(read_password(vendor)))


@router.get("/vendors", response_model=VendorListResponse)
def get_vendors(
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> VendorListResponse:
    """Vendors of the active organization, newest first, without passwords."""
    return VendorListResponse(
        vendors=[VendorSummary(**_summary_fields(v)) for v in list_vendors(db, active.org.id)]
    )


@router.post("/vendors", response_model=VendorDetail, status_code=status.HTTP_201_CREATED)
def add_vendor(
    body: VendorCreate,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> VendorDetail:
    """Create a vendor.

    Raises:
        HTTPException 400: If any field is empty
    """
    try:
        vendor = create_vendor(db, active.org.id, body, active.user.actor_name)
    except VendorValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    db.commit()
    vendor_events_total.labels(action=ACTION_CREATED).inc()
    logger.info("Vendor created", extra={"vendor_id": vendor.id})
    return _detail(vendor)


@router.get("/vendors/{vendor_id}", response_model=VendorDetail)
def get_vendor_detail(
    vendor_id: str,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> VendorDetail:
    """Vendor detail with the password masked.

    Raises:
        HTTPException 404: If the vendor is not in the active organization
    """
    try:
        return _detail(get_vendor(db, active.org.id, vendor_id))
    except VendorNotFoundError:
        raise _not_found()


@router.patch("/vendors/{vendor_id}", response_model=VendorUpdateResponse)
def patch_vendor(
    vendor_id: str,
    body: VendorUpdate,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> VendorUpdateResponse:
    """Update the fields that differ from the stored vendor.

    Raises:
        HTTPException 400: If the name would become empty
        HTTPException 404: If the vendor is not in the active organization
    """
    try:
        changes = update_vendor(db, active.org.id, vendor_id, body, active.user.actor_name)
    except VendorNotFoundError:
        raise _not_found()
    except VendorValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    db.commit()
    if changes:
        vendor_events_total.labels(action=ACTION_UPDATED).inc()
    return VendorUpdateResponse(
        fields_changed=changes,
        vendor=_detail(get_vendor(db, active.org.id, vendor_id)),
    )


@router.delete("/vendors/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_vendor(
    vendor_id: str,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> None:
    """Delete a vendor. Its activity log is kept.

    Raises:
        HTTPException 404: If the vendor is not in the active organization
    """
    try:
        delete_vendor(db, active.org.id, vendor_id, active.user.actor_name)
    except VendorNotFoundError:
        raise _not_found()

    db.commit()
    vendor_events_total.labels(action=ACTION_DELETED).inc()
    logger.info("Vendor deleted", extra={"vendor_id": vendor_id})


def _disclose(db: Session, active: ActiveOrg, vendor_id: str, action: str) -> PasswordResponse:
    try:
        password = disclose_password(db, active.org.id, vendor_id, active.user.actor_name, action)
    except VendorNotFoundError:
        raise _not_found()

    db.commit()
    vendor_events_total.labels(action=action).inc()
    return PasswordResponse(password=password)


@router.post("/vendors/{vendor_id}/reveal", response_model=PasswordResponse)
def reveal_vendor_password(
    vendor_id: str,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> PasswordResponse:
    """Return the clear-text password and log "Password revealed"."""
    return _disclose(db, active, vendor_id, ACTION_REVEALED)


@router.post("/vendors/{vendor_id}/copy", response_model=PasswordResponse)
def copy_vendor_password(
    vendor_id: str,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> PasswordResponse:
    """Return the clear-text password and log "Password copied"."""
    return _disclose(db, active, vendor_id, ACTION_COPIED)


@router.get("/vendors/{vendor_id}/activity", response_model=VendorActivityListResponse)
def get_vendor_activity(
    vendor_id: str,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_active_org),
) -> VendorActivityListResponse:
    """Activity of a vendor, newest first.

    Raises:
        HTTPException 404: If the active organization has no such vendor
    """
    try:
        events = list_activity(db, active.org.id, vendor_id)
    except VendorNotFoundError:
        raise _not_found()
    return VendorActivityListResponse(events=[VendorActivityResponse.model_validate(e) for e in events])
