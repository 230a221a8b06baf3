"""
Seasonal pricing rule repository.
"""

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import and_, extract, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from homestay.core.exceptions import DatabaseError, PricingRuleNotFoundError
from homestay.models.enums import PricingRuleStatus
from homestay.models.pricing import SeasonalPricingRule
from homestay.repositories.base_repository import BaseRepository

_SORTABLE_FIELDS = {
    "start_date": SeasonalPricingRule.start_date,
    "end_date": SeasonalPricingRule.end_date,
    "priority": SeasonalPricingRule.priority,
    "base_price": SeasonalPricingRule.base_price,
    "season_name": SeasonalPricingRule.season_name,
    "created_at": SeasonalPricingRule.created_at,
}


@dataclass
class PricingRuleFilter:
    """Search criteria for rule listings."""

    room_type_id: Optional[str] = None
    status: Optional[PricingRuleStatus] = None
    year: Optional[int] = None
    sort_by: str = "start_date"
    sort_desc: bool = False
    skip: int = 0
    limit: int = 50


class SeasonalPricingRuleRepository(BaseRepository[SeasonalPricingRule]):
    """Repository for seasonal pricing rules."""

    not_found_error = PricingRuleNotFoundError

    def __init__(self, db: Session):
        super().__init__(SeasonalPricingRule, db)

    def lock_rule(self, rule_id: str) -> SeasonalPricingRule:
        """Reload the rule row with ``SELECT ... FOR UPDATE``, overwriting any stale copy."""
        try:
            rule = self.db.scalar(
                select(SeasonalPricingRule)
                .where(SeasonalPricingRule.id == rule_id)
                .with_for_update(of=SeasonalPricingRule)
                .execution_options(populate_existing=True)
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Rule lock failed: {str(e)}") from e
        if rule is None:
            raise PricingRuleNotFoundError(rule_id)
        return rule

    def find_applicable_rules(self, room_type_id: str, day: date) -> List[SeasonalPricingRule]:
        """
        Active rules whose inclusive window contains ``day``, best first:
        highest priority, then earliest start date.
        """
        stmt = (
            select(SeasonalPricingRule)
            .where(
                SeasonalPricingRule.room_type_id == room_type_id,
                SeasonalPricingRule.status == PricingRuleStatus.ACTIVE,
                SeasonalPricingRule.start_date <= day,
                SeasonalPricingRule.end_date >= day,
            )
            .order_by(
                SeasonalPricingRule.priority.desc(),
                SeasonalPricingRule.start_date.asc(),
                SeasonalPricingRule.id.asc(),
            )
        )
        try:
            return list(self.db.scalars(stmt).unique().all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Rule lookup failed: {str(e)}") from e

    def find_active_in_window(self, room_type_id: str, start: date, end: date) -> List[SeasonalPricingRule]:
        """Active rules of the room type touching the inclusive window ``[start, end]``."""
        stmt = select(SeasonalPricingRule).where(
            SeasonalPricingRule.room_type_id == room_type_id,
            SeasonalPricingRule.status == PricingRuleStatus.ACTIVE,
            SeasonalPricingRule.start_date <= end,
            SeasonalPricingRule.end_date >= start,
        )
        return list(self.db.scalars(stmt).unique().all())

    def find_overlapping(
        self,
        room_type_id: str,
        start_date: date,
        end_date: date,
        priority: int,
        exclude_rule_id: Optional[str] = None,
    ) -> List[SeasonalPricingRule]:
        """
        Active rules at the same priority whose inclusive window intersects
        ``[start_date, end_date]``.
        """
        stmt = select(SeasonalPricingRule).where(
            SeasonalPricingRule.room_type_id == room_type_id,
            SeasonalPricingRule.status == PricingRuleStatus.ACTIVE,
            SeasonalPricingRule.priority == priority,
            SeasonalPricingRule.start_date <= end_date,
            SeasonalPricingRule.end_date >= start_date,
        )
        if exclude_rule_id:
            stmt = stmt.where(SeasonalPricingRule.id != exclude_rule_id)
        try:
            return list(self.db.scalars(stmt).unique().all())
        except SQLAlchemyError as e:
            raise DatabaseError(f"Overlap lookup failed: {str(e)}") from e

    def search(self, criteria: PricingRuleFilter) -> Tuple[List[SeasonalPricingRule], int]:
        """Filtered, sorted and paginated listing plus the unpaginated total."""
        conditions = []
        if criteria.room_type_id:
            conditions.append(SeasonalPricingRule.room_type_id == criteria.room_type_id)
        if criteria.status is not None:
            conditions.append(SeasonalPricingRule.status == criteria.status)
        if criteria.year is not None:
            # A rule belongs to a year when its window touches that year
            conditions.append(
                or_(
                    extract("year", SeasonalPricingRule.start_date) == criteria.year,
                    extract("year", SeasonalPricingRule.end_date) == criteria.year,
                    and_(
                        extract("year", SeasonalPricingRule.start_date) < criteria.year,
                        extract("year", SeasonalPricingRule.end_date) > criteria.year,
                    ),
                )
            )

        sort_column = _SORTABLE_FIELDS.get(criteria.sort_by, SeasonalPricingRule.start_date)
        order = sort_column.desc() if criteria.sort_desc else sort_column.asc()

        stmt = select(SeasonalPricingRule).where(*conditions).order_by(order, SeasonalPricingRule.id)
        count_stmt = select(func.count()).select_from(SeasonalPricingRule).where(*conditions)
        try:
            total = int(self.db.scalar(count_stmt) or 0)
            items = list(
                self.db.scalars(stmt.offset(criteria.skip).limit(criteria.limit)).unique().all()
            )
        except SQLAlchemyError as e:
            raise DatabaseError(f"Rule search failed: {str(e)}") from e
        return items, total
