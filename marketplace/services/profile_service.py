"""Profile lookups used to attribute addresses to a local identity."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import NotFoundException
from ..models import Profile
from ..storage import ProfileStorage

logger = logging.getLogger(__name__)


@dataclass
class ProfileService:
    storage: ProfileStorage

    async def create(self, name: str, address: str) -> Profile:
        record = await self.storage.create_profile({"name": name, "address": address})
        return Profile.from_record(record)

    async def find_one(self, profile_id: int) -> Profile:
        record = await self.storage.get_profile(profile_id)
        if record is None:
            logger.warning(f"Profile with the id={profile_id} was not found!")
            raise NotFoundException(profile_id)
        return Profile.from_record(record)

    async def find_one_by_address(self, address: str) -> Profile | None:
        record = await self.storage.get_profile_by_address(address)
        return Profile.from_record(record) if record else None
