"""
Extractor Factory
=================
Routes to the correct extractor for a scan mode.

Usage
-----
    factory   = ExtractorFactory()
    extractor = factory.get_extractor("order")
    receipt   = extractor.extract(text)
"""

from typing import Dict, Optional

from loguru import logger

from mediflex.extractor.base_extractor import BaseExtractor
from mediflex.extractor.order_receipt_extractor import OrderReceiptExtractor
from mediflex.extractor.patient_extractor import PatientMedicineExtractor
from mediflex.extractor.product_extractor import ProductLabelExtractor


class ExtractorFactory:
    """
    Returns the appropriate extractor for a given scan mode.

    Unknown modes fall back to ProductLabelExtractor (single product).
    """

    DEFAULT_MODE = "single_product"

    # ── Mapping: mode → extractor class ───────────────────────────────────────
    _CLASSES = {
        "single_product": ProductLabelExtractor,
        "patient":        PatientMedicineExtractor,
        "order":          OrderReceiptExtractor,
    }

    def __init__(self, config: Optional[Dict] = None):
        self.config = config
        self._extractors: Dict[str, BaseExtractor] = {}   # lazy-initialized per mode

    def resolve_mode(self, mode: str) -> str:
        """Return ``mode`` if supported, else the single-product default."""
        if mode not in self._CLASSES:
            logger.warning(
                f"[ExtractorFactory] Unknown mode '{mode}', "
                f"falling back to {self._CLASSES[self.DEFAULT_MODE].__name__}"
            )
            return self.DEFAULT_MODE
        return mode

    def get_extractor(self, mode: str) -> BaseExtractor:
        """
        Return a (cached) extractor instance for the given mode.

        Parameters
        ----------
        mode : str
            One of: 'single_product', 'patient', 'order'
        """
        mode = self.resolve_mode(mode)

        if mode not in self._extractors:
            cls = self._CLASSES[mode]
            self._extractors[mode] = cls(self.config)
            logger.debug(f"[ExtractorFactory] Initialised {cls.__name__}")

        return self._extractors[mode]

    @property
    def supported_modes(self) -> list:
        """List of all supported mode strings."""
        return list(self._CLASSES.keys())
