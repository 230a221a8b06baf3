"""
Additional service catalog repository.
"""

from typing import Dict, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from homestay.core.exceptions import ServiceNotFoundError
from homestay.models.service import AdditionalService
from homestay.repositories.base_repository import BaseRepository


class AdditionalServiceRepository(BaseRepository[AdditionalService]):
    not_found_error = ServiceNotFoundError

    def __init__(self, db: Session):
        super().__init__(AdditionalService, db)

    def find_many(self, service_ids: Iterable[str]) -> Dict[str, AdditionalService]:
        ids = list(set(service_ids))
        if not ids:
            return {}
        stmt = select(AdditionalService).where(AdditionalService.id.in_(ids))
        return {service.id: service for service in self.db.scalars(stmt).all()}
