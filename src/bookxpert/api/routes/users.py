"""Cached user endpoints.

A PersistenceFailure from the user table surfaces as a 500 through
ErrorHandlingMiddleware.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status

from bookxpert.api.dependencies import get_user_repository
from bookxpert.api.models import UserDetailsRequest, UserDetailsResponse
from bookxpert.domain.users import UserDetails, UserDetailsRepository

logger = structlog.get_logger()
router = APIRouter(prefix="/user", tags=["user"])


def _no_user() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="No user is logged in",
    )


@router.get("", response_model=UserDetailsResponse)
async def get_user(
    repository: UserDetailsRepository = Depends(get_user_repository),  # noqa: B008
) -> UserDetailsResponse:
    """Return the cached user; 404 when nobody is logged in."""
    details = await repository.get_user_details()
    if details is None:
        raise _no_user()
    return UserDetailsResponse.from_details(details)


@router.put("", response_model=UserDetailsResponse)
async def save_user(
    user: UserDetailsRequest,
    repository: UserDetailsRepository = Depends(get_user_repository),  # noqa: B008
) -> UserDetailsResponse:
    """Cache the signed-in user, keeping any existing profile photo."""
    current = await repository.get_user_details()
    image = current.profile_image if current and current.uid == user.uid else None
    details = await repository.save_user_details(
        UserDetails(
            uid=user.uid,
            email=user.email,
            display_name=user.display_name,
            profile_image=image,
        )
    )

    logger.info("user_saved", uid=details.uid)
    return UserDetailsResponse.from_details(details)


@router.put("/photo", response_model=UserDetailsResponse)
async def save_profile_photo(
    request: Request,
    repository: UserDetailsRepository = Depends(get_user_repository),  # noqa: B008
) -> UserDetailsResponse:
    """Store raw image bytes as the cached user's profile photo."""
    image = await request.body()
    if not image:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Profile image cannot be empty",
        )

    details = await repository.save_profile_image(image)
    if details is None:
        raise _no_user()
    return UserDetailsResponse.from_details(details)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    repository: UserDetailsRepository = Depends(get_user_repository),  # noqa: B008
) -> None:
    """Forget the cached user."""
    await repository.delete_user_details()
    logger.info("user_signed_out")
