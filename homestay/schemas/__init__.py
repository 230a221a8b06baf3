from homestay.schemas.common import BaseSchema, Principal

__all__ = ["BaseSchema", "Principal"]
