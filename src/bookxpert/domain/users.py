"""Locally cached user details."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from bookxpert.storage import StorageError, UserRecord, UserTable

from .base import PersistenceFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserDetails:
    """The signed-in user as cached on this device."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    profile_image: bytes | None = None

    def to_record(self) -> UserRecord:
        return UserRecord(
            uid=self.uid,
            email=self.email,
            display_name=self.display_name,
            profile_image=self.profile_image,
        )

    @classmethod
    def from_record(cls, record: UserRecord) -> UserDetails:
        return cls(
            uid=record.uid,
            email=record.email,
            display_name=record.display_name,
            profile_image=record.profile_image,
        )


class UserDetailsRepository:
    """Reads and writes the single cached user.

    The stored user is memoized after the first successful read. Being
    logged in means nothing more than a user being cached locally.
    """

    def __init__(self, table: UserTable):
        self.table = table
        self._user: UserDetails | None = None

    async def is_user_logged_in(self) -> bool:
        return await self.get_user_details() is not None

    async def get_user_details(self) -> UserDetails | None:
        if self._user is not None:
            return self._user

        try:
            record = await self.table.fetch()
        except StorageError as e:
            raise PersistenceFailure(f"Unable to read user details: {e}") from e
        if record is None:
            return None
        self._user = UserDetails.from_record(record)
        return self._user

    async def save_user_details(self, details: UserDetails) -> UserDetails:
        """Create or overwrite the cached user.

        Raises:
            PersistenceFailure: The write failed; the memoized user is unchanged
        """
        await self._write(details)
        self._user = details
        logger.info(f"Saved user details for {details.uid}")
        return details

    async def save_profile_image(self, image: bytes) -> UserDetails | None:
        """Attach a profile photo to the cached user.

        Does nothing and returns None when no user is cached.
        """
        current = await self.get_user_details()
        if current is None:
            logger.info("No cached user; profile image not saved")
            return None

        updated = replace(current, profile_image=image)
        await self._write(updated)
        self._user = updated
        return updated

    async def delete_user_details(self) -> None:
        """Forget the cached user (sign out)."""
        try:
            await self.table.delete()
        except StorageError as e:
            raise PersistenceFailure(f"Unable to delete user details: {e}") from e
        self._user = None

    async def _write(self, details: UserDetails) -> None:
        try:
            await self.table.save(details.to_record())
        except StorageError as e:
            raise PersistenceFailure(f"Unable to save user details: {e}") from e
