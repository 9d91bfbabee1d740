"""Address persistence for bid shipping addresses."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..exceptions import NotFoundException
from ..models import Address, Profile
from ..requests import AddressCreateRequest
from ..storage import AddressStorage
from .profile_service import ProfileService

logger = logging.getLogger(__name__)


@dataclass
class AddressService:
    storage: AddressStorage
    profile_service: ProfileService

    async def create(self, request: AddressCreateRequest) -> Address:
        record = await self.storage.create_address(request.to_payload())
        return Address.from_record(record)

    async def find_one(self, address_id: int, with_related: bool = True) -> Address:
        record = await self.storage.get_address(address_id)
        if record is None:
            logger.warning(f"Address with the id={address_id} was not found!")
            raise NotFoundException(address_id)
        profile: Profile | None = None
        profile_id = record.get("profile_id")
        if with_related and profile_id is not None:
            try:
                profile = await self.profile_service.find_one(profile_id)
            except NotFoundException:
                profile = None
        return Address.from_record(record, profile=profile)
