from homestay.repositories.base_repository import BaseRepository
from homestay.repositories.booking_repository import BookingRepository
from homestay.repositories.pricing_repository import PricingRuleFilter, SeasonalPricingRuleRepository
from homestay.repositories.room_repository import RoomRepository, RoomTypeRepository
from homestay.repositories.service_repository import AdditionalServiceRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "PricingRuleFilter",
    "SeasonalPricingRuleRepository",
    "RoomRepository",
    "RoomTypeRepository",
    "AdditionalServiceRepository",
]
