"""
Base Extractor
==============
Contains ALL shared extraction logic:
  - line splitting   (non-empty, trimmed)
  - classification   (LineClassifier, patient or receipt flavour)
  - accumulation     (ProductAccumulator)
  - fallback         (FallbackScanner, only when nothing was accumulated)

Subclasses override ONLY _assemble() to package the output shape they
produce, and set the class attributes below to pick their flavour.
"""

from typing import Dict, List, Optional

from loguru import logger

from mediflex.extractor.accumulator import ProductAccumulator
from mediflex.extractor.fallback_scanner import FallbackScanner
from mediflex.extractor.fields import NAME_MAX_LENGTH, NAME_MIN_LENGTH
from mediflex.extractor.line_classifier import LineClassifier
from mediflex.models import ClassifiedLine, ExtractedProduct


class BaseExtractor:
    """
    Abstract base class.  Subclasses implement _assemble().

    Call extract(text) → returns the typed result for that document shape.
    Never raises for any string input (None is read as "").
    """

    patient_mode: bool = False
    strict_batch: bool = False
    record_model = ExtractedProduct

    def __init__(self, config: Optional[Dict] = None):
        extraction = (config or {}).get('extraction', {}) or {}

        self.name_min_length = extraction.get('name_min_length', NAME_MIN_LENGTH)
        self.name_max_length = extraction.get('name_max_length', NAME_MAX_LENGTH)
        self.enable_fallback = extraction.get('enable_fallback', True)

        self.classifier = LineClassifier(patient_mode=self.patient_mode)
        self.accumulator = ProductAccumulator(
            record_model=self.record_model,
            strict_batch=self.strict_batch,
            name_min_length=self.name_min_length,
            name_max_length=self.name_max_length,
        )
        self.fallback = FallbackScanner(
            min_length=extraction.get('fallback_min_length', 10),
            strict_batch=self.strict_batch,
        )

    # ── Public entry point ────────────────────────────────────────────────────

    def extract(self, text: Optional[str]):
        lines = self.split_lines(text)
        result = self._assemble(lines)
        logger.info(f"[{type(self).__name__}] {len(lines)} lines → {self._describe(result)}")
        return result

    @staticmethod
    def split_lines(text: Optional[str]) -> List[str]:
        return [line.strip() for line in (text or '').splitlines() if line.strip()]

    # ── Shared pipeline ───────────────────────────────────────────────────────

    def _records(self, classified: List[ClassifiedLine], lines: List[str]) -> List[ExtractedProduct]:
        records = self.accumulator.accumulate(classified)
        if not records and self.enable_fallback:
            logger.debug(f"[{type(self).__name__}] accumulator empty, running fallback scan")
            records = self.fallback.scan(lines, self.record_model)
        return records

    # ── Subclass hooks ────────────────────────────────────────────────────────

    def _assemble(self, lines: List[str]):
        raise NotImplementedError

    def _describe(self, result) -> str:
        return type(result).__name__
