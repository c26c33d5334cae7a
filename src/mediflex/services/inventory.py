"""
Inventory service - stock items, search, barcode lookup and saving what
the OCR parsers extracted.
"""

from datetime import date, timedelta
from typing import List, Optional, Union

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from mediflex.models import (
    ExtractedProduct,
    InventoryItem,
    NewInventoryItem,
    OrderReceiptData,
    PatientRecipient,
    SingleProductGuess,
)
from mediflex.services.storage import INVENTORY_KEY, StoragePort

_ITEMS = TypeAdapter(List[InventoryItem])

UNKNOWN_NAME  = "Unknown Medicine"
UNKNOWN_BATCH = "UNKNOWN"


class InventoryService:

    def __init__(self, storage: StoragePort):
        self.storage = storage

    def get_inventory(self) -> List[InventoryItem]:
        stored = self.storage.get(INVENTORY_KEY)
        if not stored:
            return []
        try:
            return _ITEMS.validate_python(stored)
        except ValidationError as e:
            logger.error(f"[InventoryService] Error parsing inventory data: {e}")
            return []

    def _save_all(self, items: List[InventoryItem]) -> None:
        self.storage.set(INVENTORY_KEY, [i.model_dump(mode='json') for i in items])

    # ── CRUD ──────────────────────────────────────────────────────────────────

    def save_item(self, item: Union[NewInventoryItem, dict]) -> InventoryItem:
        if isinstance(item, dict):
            item = NewInventoryItem.model_validate(item)

        inventory = self.get_inventory()
        new_id = max((i.id for i in inventory), default=0) + 1
        saved = InventoryItem(id=new_id, **item.model_dump())
        inventory.append(saved)
        self._save_all(inventory)

        logger.debug(f"[InventoryService] Saved #{new_id} '{saved.name}' batch={saved.batch}")
        return saved

    def update_item(self, item_id: int, **updates) -> Optional[InventoryItem]:
        inventory = self.get_inventory()
        for i, item in enumerate(inventory):
            if item.id == item_id:
                updates.pop('id', None)
                inventory[i] = InventoryItem.model_validate({**item.model_dump(), **updates})
                self._save_all(inventory)
                return inventory[i]
        return None

    def delete_item(self, item_id: int) -> bool:
        inventory = self.get_inventory()
        remaining = [i for i in inventory if i.id != item_id]
        if len(remaining) == len(inventory):
            return False
        self._save_all(remaining)
        logger.info(f"[InventoryService] Deleted #{item_id}")
        return True

    # ── Lookup ────────────────────────────────────────────────────────────────

    def search_inventory(self, text: str) -> List[InventoryItem]:
        """Case-insensitive substring match on name or batch."""
        needle = (text or '').strip().lower()
        if not needle:
            return []
        return [
            item for item in self.get_inventory()
            if needle in item.name.lower() or needle in item.batch.lower()
        ]

    def find_by_barcode(self, code: str) -> Optional[InventoryItem]:
        """Exact batch match; barcodes on strips encode the batch number."""
        if not (code or '').strip():
            return None
        for item in self.get_inventory():
            if item.batch == code:
                return item
        return None

    def get_expiring(self, within_days: int, today: Optional[date] = None) -> List[InventoryItem]:
        """Items whose expiry falls on or before ``today + within_days``, soonest first."""
        today = today or date.today()
        limit = today + timedelta(days=within_days)

        expiring = []
        for item in self.get_inventory():
            try:
                expiry = date.fromisoformat(item.expiry)
            except ValueError:
                logger.debug(f"[InventoryService] #{item.id} has unreadable expiry '{item.expiry}'")
                continue
            if expiry <= limit:
                expiring.append((expiry, item))

        return [item for _, item in sorted(expiring, key=lambda pair: pair[0])]

    # ── Saving extracted records ──────────────────────────────────────────────

    def save_extracted(self, product: Union[ExtractedProduct, SingleProductGuess]) -> InventoryItem:
        return self.save_item(NewInventoryItem(
            name=product.name or UNKNOWN_NAME,
            batch=product.batch or UNKNOWN_BATCH,
            expiry=product.expiry or date.today().isoformat(),
            price=product.price or 0.0,
            stock=product.quantity or 1,
        ))

    def add_patient_medicines(self, patient: PatientRecipient) -> List[InventoryItem]:
        saved = [self.save_extracted(medicine) for medicine in patient.medicines]
        logger.info(f"[InventoryService] Saved {len(saved)} medicines for patient '{patient.name}'")
        return saved

    def add_order_to_inventory(
        self,
        order: OrderReceiptData,
        distributor_id: Optional[int] = None,
    ) -> List[InventoryItem]:
        saved = [self.save_extracted(product) for product in order.products]
        logger.info(
            f"[InventoryService] Added {len(saved)} products from receipt "
            f"{order.receipt_id or '-'} (distributor #{distributor_id})"
        )
        return saved
