"""
Regular buyer service - customers who come back, and what they bought.
"""

import math
from typing import TYPE_CHECKING, Iterable, List, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from mediflex.models import Buyer, BuyerPurchase, NewBuyerPurchase
from mediflex.services.storage import BUYERS_KEY, StoragePort

if TYPE_CHECKING:
    from mediflex.services.dashboard import DashboardService

_BUYERS = TypeAdapter(List[Buyer])


def format_price(amount: float) -> str:
    """"₹" plus the amount rounded half-up to a whole number."""
    return f"₹{math.floor(amount + 0.5)}"


def calculate_total_spend(purchases: Iterable[BuyerPurchase]) -> float:
    return sum(p.price * p.quantity for p in purchases)


def _next_id(records) -> int:
    return max((r.id for r in records), default=0) + 1


class BuyerService:

    def __init__(self, storage: StoragePort, dashboard: Optional["DashboardService"] = None):
        self.storage = storage
        self.dashboard = dashboard

    def get_buyers(self) -> List[Buyer]:
        stored = self.storage.get(BUYERS_KEY)
        if not stored:
            return []
        try:
            return _BUYERS.validate_python(stored)
        except ValidationError as e:
            logger.error(f"[BuyerService] Error parsing buyers data: {e}")
            return []

    def _save_all(self, buyers: List[Buyer]) -> None:
        self.storage.set(BUYERS_KEY, [b.model_dump(mode='json') for b in buyers])

    def add_buyer(self, name: str, contact: str, notes: str = "") -> Buyer:
        if not (name or '').strip() or not (contact or '').strip():
            raise ValueError("Buyer name and contact are required")

        buyers = self.get_buyers()
        buyer = Buyer(id=_next_id(buyers), name=name.strip(), contact=contact.strip(), notes=notes or "")
        buyers.append(buyer)
        self._save_all(buyers)

        logger.info(f"[BuyerService] Added buyer #{buyer.id} '{buyer.name}'")
        if self.dashboard is not None:
            self.dashboard.add_activity('distribution', f"Added new buyer: {buyer.name}")
        return buyer

    def update_buyer(self, buyer_id: int, **updates) -> Optional[Buyer]:
        buyers = self.get_buyers()
        for i, buyer in enumerate(buyers):
            if buyer.id == buyer_id:
                updates.pop('id', None)
                buyers[i] = Buyer.model_validate({**buyer.model_dump(), **updates})
                self._save_all(buyers)
                return buyers[i]
        return None

    def delete_buyer(self, buyer_id: int) -> bool:
        buyers = self.get_buyers()
        remaining = [b for b in buyers if b.id != buyer_id]
        if len(remaining) == len(buyers):
            return False
        self._save_all(remaining)
        logger.info(f"[BuyerService] Deleted buyer #{buyer_id}")
        return True

    def add_purchase(
        self,
        buyer_id: int,
        purchase: Union[NewBuyerPurchase, dict],
    ) -> Optional[Buyer]:
        if isinstance(purchase, dict):
            purchase = NewBuyerPurchase.model_validate(purchase)

        buyers = self.get_buyers()
        for buyer in buyers:
            if buyer.id == buyer_id:
                record = BuyerPurchase(id=_next_id(buyer.purchases), **purchase.model_dump())
                buyer.purchases.append(record)
                self._save_all(buyers)
                logger.debug(f"[BuyerService] Purchase '{record.medicine}' x{record.quantity} for buyer #{buyer_id}")
                return buyer
        return None

    def search_buyers(self, term: str) -> List[Buyer]:
        """Case-insensitive match on name or contact. A blank term returns everyone."""
        needle = (term or '').strip().lower()
        buyers = self.get_buyers()
        if not needle:
            return buyers
        return [b for b in buyers if needle in b.name.lower() or needle in b.contact.lower()]
