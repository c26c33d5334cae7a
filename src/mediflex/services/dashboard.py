"""
Dashboard service - recent activity feed, scan / report counters and the
six headline statistics.
"""

from datetime import date, datetime
from typing import List, Optional

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from mediflex.models import ActivityType, Buyer, DashboardStat, Distributor, RecentActivity
from mediflex.services.buyers import format_price
from mediflex.services.storage import (
    ACTIVITIES_KEY,
    BUYERS_KEY,
    DISTRIBUTORS_KEY,
    INVENTORY_KEY,
    OCR_SCANS_KEY,
    REPORTS_KEY,
    StoragePort,
)

_ACTIVITIES   = TypeAdapter(List[RecentActivity])
_BUYERS       = TypeAdapter(List[Buyer])
_DISTRIBUTORS = TypeAdapter(List[Distributor])


def _parse_day(value) -> Optional[date]:
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


class DashboardService:

    def __init__(self, storage: StoragePort, max_activities: int = 10):
        self.storage = storage
        self.max_activities = max_activities

    # ── Activity feed ─────────────────────────────────────────────────────────

    def get_recent_activities(self) -> List[RecentActivity]:
        """Newest first."""
        stored = self.storage.get(ACTIVITIES_KEY)
        if not stored:
            return []
        try:
            return _ACTIVITIES.validate_python(stored)
        except ValidationError as e:
            logger.error(f"[DashboardService] Error parsing activities data: {e}")
            return []

    def add_activity(self, type: ActivityType, title: str) -> RecentActivity:
        activity = RecentActivity(type=type, title=title, timestamp=datetime.now())
        activities = [activity] + self.get_recent_activities()
        activities = activities[:self.max_activities]
        self.storage.set(ACTIVITIES_KEY, [a.model_dump(mode='json') for a in activities])
        logger.debug(f"[DashboardService] activity [{type}] {title}")
        return activity

    # ── Counters ──────────────────────────────────────────────────────────────

    def _count(self, key: str) -> int:
        try:
            return int(self.storage.get(key, 0) or 0)
        except (TypeError, ValueError):
            logger.error(f"[DashboardService] Counter '{key}' is not a number, treating as 0")
            return 0

    def track_ocr_scan(self) -> int:
        count = self._count(OCR_SCANS_KEY) + 1
        self.storage.set(OCR_SCANS_KEY, count)
        return count

    def track_report(self) -> int:
        count = self._count(REPORTS_KEY) + 1
        self.storage.set(REPORTS_KEY, count)
        return count

    # ── Statistics ────────────────────────────────────────────────────────────

    def _list(self, key: str) -> list:
        value = self.storage.get(key, [])
        if not isinstance(value, list):
            logger.error(f"[DashboardService] '{key}' is not a list, treating as empty")
            return []
        return value

    def _validated(self, key: str, adapter: TypeAdapter) -> list:
        stored = self.storage.get(key)
        if not stored:
            return []
        try:
            return adapter.validate_python(stored)
        except ValidationError as e:
            logger.error(f"[DashboardService] Error parsing '{key}' data: {e}")
            return []

    def get_dashboard_stats(self, today: Optional[date] = None) -> List[DashboardStat]:
        today = today or date.today()
        month_start = today.replace(day=1)

        inventory = self._list(INVENTORY_KEY)
        buyers: List[Buyer] = self._validated(BUYERS_KEY, _BUYERS)
        distributors: List[Distributor] = self._validated(DISTRIBUTORS_KEY, _DISTRIBUTORS)

        monthly_distributions = 0
        for distributor in distributors:
            for product in distributor.products:
                day = _parse_day(product.date)
                if day is not None and day >= month_start:
                    monthly_distributions += 1

        monthly_sales = 0.0
        for buyer in buyers:
            for purchase in buyer.purchases:
                day = _parse_day(purchase.date)
                if day is not None and day >= month_start:
                    monthly_sales += purchase.price * purchase.quantity

        return [
            DashboardStat(title="Total Products",    value=str(len(inventory)),             description="Products in database"),
            DashboardStat(title="OCR Scans",         value=str(self._count(OCR_SCANS_KEY)), description="Documents scanned"),
            DashboardStat(title="Regular Buyers",    value=str(len(buyers)),                description="Active customers"),
            DashboardStat(title="Distributions",     value=str(monthly_distributions),      description="This month"),
            DashboardStat(title="Total Sales",       value=format_price(monthly_sales),     description="This month"),
            DashboardStat(title="Reports Generated", value=str(self._count(REPORTS_KEY)),   description="This month"),
        ]
