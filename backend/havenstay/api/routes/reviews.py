"""Reviews API routes."""

from fastapi import APIRouter, Depends, status

from havenstay.api.deps import get_storage, require_authenticated
from havenstay.models.user import User
from havenstay.schemas.review import ReviewCreate, ReviewResponse
from havenstay.services import ledger
from havenstay.storage.base import Storage

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def create_review(
    body: ReviewCreate,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> ReviewResponse:
    """Review a completed stay. Each booking can be reviewed once, by its guest."""
    review = await ledger.create_review(storage, current_user, body)
    await storage.commit()
    return ReviewResponse.model_validate(review)


@router.get("", response_model=list[ReviewResponse])
async def list_my_reviews(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(require_authenticated),
) -> list[ReviewResponse]:
    reviews = await ledger.list_guest_reviews(storage, current_user)
    return [ReviewResponse.model_validate(r) for r in reviews]
