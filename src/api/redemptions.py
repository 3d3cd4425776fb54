"""Admin API endpoints for managing redemption codes.

Every endpoint requires a bearer access token. Domain failures are raised as
RedemptionError and rendered by the application's exception handler.
"""

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel
from typing import List
from sqlalchemy.orm import Session

from src.database.session import get_db
from src.database.models import RedemptionStatus
from src.api.auth import get_current_user_id
from src.api.pagination import Page, PageQuery, get_page_query
from src.services.quota import QuotaAllocator
from src.services.redemptions import RedemptionService
from src.services.validation import RedemptionBatchRequest


router = APIRouter(prefix="/redemption", tags=["redemption"])


# ============================================================================
# Pydantic Models
# ============================================================================

class RedemptionResponse(BaseModel):
    """Redemption code response."""
    id: int
    user_id: int
    key: str
    status: RedemptionStatus
    name: str
    quota: int
    created_time: int
    redeemed_time: int
    used_user_id: int
    expired_time: int

    model_config = {"from_attributes": True}


class CreateRedemptionRequest(BaseModel):
    """
    Request to generate a batch of redemption codes.

    Bounds are checked by the service, which reports typed errors.
    """
    name: str = ""
    count: int = 0
    quota: int = 0
    expired_time: int = 0
    random_mode: bool = False
    min_quota: int = 0
    max_quota: int = 0


class CreateRedemptionResponse(BaseModel):
    """Keys of the generated codes, in creation order."""
    keys: List[str]


class UpdateRedemptionRequest(BaseModel):
    """Request to replace the editable fields of a code."""
    name: str
    quota: int
    expired_time: int = 0


class UpdateRedemptionStatusRequest(BaseModel):
    """Request to change the status of a code."""
    status: RedemptionStatus


class DeleteInvalidResponse(BaseModel):
    deleted: int


# ============================================================================
# Dependencies
# ============================================================================

def get_redemption_service(request: Request, db: Session = Depends(get_db)) -> RedemptionService:
    """Build a per-request service around the application's shared random source."""
    allocator = QuotaAllocator(request.app.state.random_source)
    return RedemptionService(db, allocator=allocator)


def _page(query: PageQuery, items, total: int) -> Page[RedemptionResponse]:
    return Page[RedemptionResponse](
        page=query.page,
        page_size=query.page_size,
        total=total,
        items=[RedemptionResponse.model_validate(item) for item in items],
    )


# ============================================================================
# Redemption Code Endpoints
# ============================================================================

@router.get("/", response_model=Page[RedemptionResponse])
def list_redemptions(
    page: PageQuery = Depends(get_page_query),
    user_id: int = Depends(get_current_user_id),
    service: RedemptionService = Depends(get_redemption_service)
):
    """
    List redemption codes, newest first.
    """
    items, total = service.list_redemptions(offset=page.offset, limit=page.page_size)
    return _page(page, items, total)


@router.get("/search", response_model=Page[RedemptionResponse])
def search_redemptions(
    keyword: str = "",
    page: PageQuery = Depends(get_page_query),
    user_id: int = Depends(get_current_user_id),
    service: RedemptionService = Depends(get_redemption_service)
):
    """
    Search redemption codes.

    Matches codes whose name starts with the keyword, or whose ID equals it
    when the keyword is numeric.
    """
    items, total = service.search_redemptions(keyword, offset=page.offset, limit=page.page_size)
    return _page(page, items, total)


@router.get("/{redemption_id}", response_model=RedemptionResponse)
def get_redemption(
    redemption_id: int,
    user_id: int = Depends(get_current_user_id),
    service: RedemptionService = Depends(get_redemption_service)
):
    """
    Get details about a specific redemption code.
    """
    return service.get_redemption(redemption_id)


@router.post("/", response_model=CreateRedemptionResponse, status_code=status.HTTP_201_CREATED)
def create_redemptions(
    request: CreateRedemptionRequest,
    user_id: int = Depends(get_current_user_id),
    service: RedemptionService = Depends(get_redemption_service)
):
    """
    Generate a batch of redemption codes.

    - 1 to 100 codes per request, name of 1 to 20 characters
    - Fixed mode gives every code `quota`; random mode draws each code's
      quota uniformly from [`min_quota`, `max_quota`]
    - `expired_time` is a Unix timestamp, 0 for codes that never expire
    - Returns the generated keys; either all codes are saved or none are
    """
    keys = service.create_redemptions(
        RedemptionBatchRequest(**request.model_dump()),
        owner_id=user_id
    )
    return CreateRedemptionResponse(keys=keys)


@router.put("/{redemption_id}", response_model=RedemptionResponse)
def update_redemption(
    redemption_id: int,
    request: UpdateRedemptionRequest,
    user_id: int = Depends(get_current_user_id),
    service: RedemptionService = Depends(get_redemption_service)
):
    """
    Update the name, quota and expiration time of a redemption code.

    The status is not changed; use the status endpoint for that.
    """
    return service.update_fields(
        redemption_id,
        name=request.name,
        quota=request.quota,
        expired_time=request.expired_time
    )


@router.put("/{redemption_id}/status", response_model=RedemptionResponse)
def update_redemption_status(
    redemption_id: int,
    request: UpdateRedemptionStatusRequest,
    user_id: int = Depends(get_current_user_id),
    service: RedemptionService = Depends(get_redemption_service)
):
    """
    Change the status of a redemption code (e.g. disable it).
    """
    return service.update_status(redemption_id, request.status)


@router.delete("/invalid", response_model=DeleteInvalidResponse)
def delete_invalid_redemptions(
    user_id: int = Depends(get_current_user_id),
    service: RedemptionService = Depends(get_redemption_service)
):
    """
    Delete every used, disabled or expired redemption code.

    Returns the number of codes removed.
    """
    return DeleteInvalidResponse(deleted=service.delete_invalid_redemptions())


@router.delete("/{redemption_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_redemption(
    redemption_id: int,
    user_id: int = Depends(get_current_user_id),
    service: RedemptionService = Depends(get_redemption_service)
):
    """
    Delete a redemption code.

    This operation is irreversible.
    """
    service.delete_redemption(redemption_id)
    return None
