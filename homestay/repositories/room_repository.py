"""
Room and room type repositories.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homestay.core.exceptions import DatabaseError, RoomNotFoundError, RoomTypeNotFoundError
from homestay.models.room import Room, RoomType
from homestay.repositories.base_repository import BaseRepository


class RoomRepository(BaseRepository[Room]):
    """Repository for bookable rooms."""

    not_found_error = RoomNotFoundError

    def __init__(self, db: Session):
        super().__init__(Room, db)

    def lock_room(self, room_id: str) -> Room:
        """
        Load the room row with ``SELECT ... FOR UPDATE``.

        Every writer that can make a booking block the room takes this lock
        first, which serializes the availability check with the write.
        SQLite drops the clause; there the transaction already holds the
        database write lock from its ``BEGIN IMMEDIATE``
        (see ``homestay.db.session.use_immediate_transactions``).
        """
        try:
            room = self.db.scalar(
                select(Room)
                .where(Room.id == room_id)
                .with_for_update(of=Room)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Room lock failed: {str(e)}") from e
        if room is None:
            raise RoomNotFoundError(room_id)
        return room


class RoomTypeRepository(BaseRepository[RoomType]):
    """Repository for room types."""

    not_found_error = RoomTypeNotFoundError

    def __init__(self, db: Session):
        super().__init__(RoomType, db)

    def lock_room_type(self, room_type_id: str) -> RoomType:
        """Row-lock a room type so pricing rule writers serialize per type."""
        try:
            room_type = self.db.scalar(
                select(RoomType)
                .where(RoomType.id == room_type_id)
                .with_for_update(of=RoomType)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Room type lock failed: {str(e)}") from e
        if room_type is None:
            raise RoomTypeNotFoundError(room_type_id)
        return room_type
