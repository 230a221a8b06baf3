from homestay.db.session import Database

__all__ = ["Database"]
