"""
Scan Processing Pipeline
Combines OCR, text extraction and persistence into one workflow
"""

from typing import Dict, List, Optional

from loguru import logger

from mediflex.extractor import ExtractorFactory
from mediflex.models import InventoryItem, OrderReceiptData, PatientRecipient, SingleProductGuess
from mediflex.ocr_engine import OCREngine
from mediflex.services import (
    DashboardService,
    DistributorService,
    InventoryService,
    JsonFileStorage,
    StoragePort,
)
from mediflex.utils import load_config


class ScanProcessor:
    """
    End-to-end scan pipeline

    Workflow:
    1. Validate the image
    2. Extract text with OCR
    3. Parse it for the selected mode (single_product / patient / order)
    4. Optionally save the result to inventory and distributors
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        storage: Optional[StoragePort] = None,
        ocr_engine: Optional[OCREngine] = None,
    ):
        self.config = load_config(config_path)

        if storage is None:
            storage = JsonFileStorage(self.config['storage']['path'])
        self.storage = storage

        self.ocr_engine = ocr_engine or OCREngine(self.config)
        self.factory = ExtractorFactory(self.config)

        self.dashboard = DashboardService(
            storage, max_activities=self.config['dashboard']['max_recent_activities']
        )
        self.inventory = InventoryService(storage)
        self.distributors = DistributorService(storage, dashboard=self.dashboard)

    # ── Parsing ───────────────────────────────────────────────────────────────

    def process_text(self, text: str, mode: str = "single_product") -> Dict:
        """
        Parse already-recognised text.

        Returns:
            {"status", "mode", "text", "result", "item_count"}
        """
        mode = self.factory.resolve_mode(mode)
        result = self.factory.get_extractor(mode).extract(text)

        self.dashboard.track_ocr_scan()
        self.dashboard.add_activity('ocr', self._activity_title(result))

        return {
            "status": "success",
            "mode": mode,
            "text": text or "",
            "result": result,
            "item_count": self._item_count(result),
        }

    def process_image(self, image_path: str, mode: str = "single_product") -> Dict:
        logger.info(f"Processing scan: {image_path} (mode={mode})")

        is_valid, msg = self.ocr_engine.validate_image(image_path)
        if not is_valid:
            return {
                'status': 'error',
                'error': f"Invalid image: {msg}",
                'image_path': image_path,
            }

        ocr_result = self.ocr_engine.extract_text(image_path)
        if ocr_result.get('status') != 'success' or not ocr_result.get('text', '').strip():
            return {
                'status': 'no_text_found',
                'mode': mode,
                'image_path': image_path,
                'text': '',
                'result': None,
                'item_count': 0,
            }

        processed = self.process_text(ocr_result['text'], mode)
        processed['image_path'] = image_path
        processed['average_confidence'] = ocr_result.get('average_confidence', 0.0)
        processed['processing_time_ms'] = ocr_result.get('processing_time_ms', 0)
        return processed

    # ── Persistence ───────────────────────────────────────────────────────────

    def save_single_product(self, guess: SingleProductGuess) -> InventoryItem:
        if not guess.name:
            raise ValueError("No product name found on label")
        return self.inventory.save_extracted(guess)

    def save_patient_medicines(self, patient: PatientRecipient) -> List[InventoryItem]:
        if not patient.medicines:
            raise ValueError("No medicines found for patient")
        return self.inventory.add_patient_medicines(patient)

    def process_order_receipt(self, order: OrderReceiptData) -> Dict:
        """
        File the receipt under its distributor, then add its products to
        inventory.

        Returns:
            {"distributor_id", "items"}
        """
        if not order.products:
            raise ValueError("No products found in receipt")

        filed = self.distributors.process_order_receipt(order)
        if not filed['success']:
            raise ValueError("Could not identify distributor from receipt")

        items = self.inventory.add_order_to_inventory(order, filed['distributor_id'])
        return {"distributor_id": filed['distributor_id'], "items": items}

    # ── Helpers ───────────────────────────────────────────────────────────────

    @staticmethod
    def _item_count(result) -> int:
        if isinstance(result, PatientRecipient):
            return len(result.medicines)
        if isinstance(result, OrderReceiptData):
            return len(result.products)
        return 1 if result.name else 0

    @staticmethod
    def _activity_title(result) -> str:
        if isinstance(result, PatientRecipient):
            return f"Scanned prescription for {result.name or 'unknown patient'} ({len(result.medicines)} medicines)"
        if isinstance(result, OrderReceiptData):
            return f"Scanned order receipt from {result.distributor_name or 'unknown distributor'}"
        return f"Scanned product label: {result.name or 'unreadable'}"
