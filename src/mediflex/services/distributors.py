"""
Distributor service - suppliers and the products they delivered.
"""

from typing import TYPE_CHECKING, Dict, List, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from mediflex.models import (
    DistributionProduct,
    Distributor,
    NewDistributionProduct,
    OrderReceiptData,
)
from mediflex.services.storage import DISTRIBUTORS_KEY, StoragePort

if TYPE_CHECKING:
    from mediflex.services.dashboard import DashboardService

_DISTRIBUTORS = TypeAdapter(List[Distributor])


class DistributorService:

    def __init__(self, storage: StoragePort, dashboard: Optional["DashboardService"] = None):
        self.storage = storage
        self.dashboard = dashboard
        if self.storage.get(DISTRIBUTORS_KEY) is None:
            self.storage.set(DISTRIBUTORS_KEY, [])

    def get_distributors(self) -> List[Distributor]:
        stored = self.storage.get(DISTRIBUTORS_KEY)
        if not stored:
            return []
        try:
            return _DISTRIBUTORS.validate_python(stored)
        except ValidationError as e:
            logger.error(f"[DistributorService] Error parsing distributors data: {e}")
            return []

    def _save_all(self, distributors: List[Distributor]) -> None:
        self.storage.set(DISTRIBUTORS_KEY, [d.model_dump(mode='json') for d in distributors])

    def clear_distributors(self) -> None:
        self.storage.set(DISTRIBUTORS_KEY, [])
        logger.info("[DistributorService] Cleared all distributors")

    def save_distributor(
        self,
        name: str,
        contact: str = "",
        address: str = "",
        products: Optional[List[DistributionProduct]] = None,
    ) -> Distributor:
        distributors = self.get_distributors()
        new_id = max((d.id for d in distributors), default=0) + 1
        distributor = Distributor(
            id=new_id, name=name, contact=contact, address=address, products=products or [],
        )
        distributors.append(distributor)
        self._save_all(distributors)
        logger.info(f"[DistributorService] Saved distributor #{new_id} '{name}'")
        return distributor

    def update_distributor(self, distributor_id: int, **updates) -> Optional[Distributor]:
        distributors = self.get_distributors()
        for i, distributor in enumerate(distributors):
            if distributor.id == distributor_id:
                updates.pop('id', None)
                distributors[i] = Distributor.model_validate({**distributor.model_dump(), **updates})
                self._save_all(distributors)
                return distributors[i]
        return None

    def add_product_to_distributor(
        self,
        distributor_id: int,
        product: Union[NewDistributionProduct, dict],
    ) -> Optional[Distributor]:
        if isinstance(product, dict):
            product = NewDistributionProduct.model_validate(product)

        distributors = self.get_distributors()
        for distributor in distributors:
            if distributor.id != distributor_id:
                continue

            new_id = max((p.id for p in distributor.products), default=0) + 1
            distributor.products.append(DistributionProduct(id=new_id, **product.model_dump()))
            self._save_all(distributors)

            if self.dashboard is not None:
                self.dashboard.add_activity(
                    'distribution', f"{product.name} distributed by {distributor.name}"
                )
            return distributor
        return None

    def find_distributor_by_name(self, name: str) -> Optional[Distributor]:
        """Case-insensitive partial match; blank names match nothing."""
        needle = (name or '').strip().lower()
        if not needle:
            return None
        for distributor in self.get_distributors():
            if needle in distributor.name.lower():
                return distributor
        return None

    def process_order_receipt(self, receipt: OrderReceiptData) -> Dict:
        """
        File every named product on a receipt under its distributor,
        creating the distributor on first sight.

        Returns
        -------
        {"success": bool, "distributor_id": int | None}
        """
        distributor = None
        if receipt.distributor_name:
            distributor = self.find_distributor_by_name(receipt.distributor_name)
            if distributor is None:
                distributor = self.save_distributor(
                    name=receipt.distributor_name,
                    contact=receipt.distributor_contact or "Unknown",
                )
                logger.info(f"[DistributorService] Created new distributor: {receipt.distributor_name}")

        if distributor is None:
            logger.warning("[DistributorService] Could not identify distributor from receipt")
            return {"success": False, "distributor_id": None}

        added = 0
        for product in receipt.products:
            if not product.name:
                continue
            self.add_product_to_distributor(distributor.id, NewDistributionProduct(
                name=product.name,
                date=receipt.date,
                quantity=product.quantity or 1,
                price=product.price or 0.0,
                receipt_id=receipt.receipt_id,
                batch_number=product.batch,
                expiry_date=product.expiry,
            ))
            added += 1

        logger.info(f"[DistributorService] Added {added} products to {distributor.name}")
        return {"success": True, "distributor_id": distributor.id}
