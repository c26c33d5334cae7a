"""
Extractor package - turns raw OCR text into pharmacy records.

One shared pipeline (classify → accumulate → fallback) lives in
BaseExtractor; each document shape only packages its own result.

Usage
-----
from mediflex.extractor import parse_order_receipt
receipt = parse_order_receipt(text)

from mediflex.extractor import ExtractorFactory
extractor = ExtractorFactory().get_extractor("patient")
patient   = extractor.extract(text)
"""

from typing import Optional

from mediflex.extractor.factory import ExtractorFactory
from mediflex.models import OrderReceiptData, PatientRecipient, SingleProductGuess

_factory = ExtractorFactory()


def parse_single_product(text: Optional[str]) -> SingleProductGuess:
    return _factory.get_extractor("single_product").extract(text)


def parse_patient_medicines(text: Optional[str]) -> PatientRecipient:
    return _factory.get_extractor("patient").extract(text)


def parse_order_receipt(text: Optional[str]) -> OrderReceiptData:
    return _factory.get_extractor("order").extract(text)


__all__ = [
    "ExtractorFactory",
    "parse_single_product",
    "parse_patient_medicines",
    "parse_order_receipt",
]
