"""
Line Classifier
===============
Tags every line of a receipt or prescription with the category it most
likely represents, in ONE sequential pass.

Priority (first match wins, no line is tagged twice)
────────────────────────────────────────────────────
  1. distributor_meta   distributor / supplier / vendor keyword
  2. contact_meta       contact / phone keyword, or a bare phone number
                        (bare numbers only before the list header, and only
                        on lines without a receipt keyword)
  3. receipt_id_meta    receipt / order / invoice keyword (not a date label)
  4. date_meta          "Date:" label carrying a date
  5. list_header        item + qty + price column words, no digits
  6. patient_meta       patient / name keyword (prescriptions only)
  7. summary            total / tax / discount lines, once inside the list
  8. product_candidate  any other line after the header
     unclassified       any other line before the header

Metadata comes before the header check so a distributor line is never
swallowed into the product rows.
"""

import re
from typing import List, Optional

from loguru import logger

from mediflex.extractor.fields import find_dates
from mediflex.models import ClassifiedLine, LineCategory


# ─── Keyword patterns ─────────────────────────────────────────────────────────

_DISTRIBUTOR_KW = re.compile(
    r'\b(?:distributor|distributed\s+by|supplier|supplied\s+by|vendor|'
    r'wholesaler|stockist)\b',
    re.IGNORECASE,
)

_CONTACT_KW = re.compile(
    r'\b(?:contact|phone|telephone|tel|mobile|mob|cell)\b\.?',
    re.IGNORECASE,
)

_PHONE = re.compile(
    r'\+\d[\d\s\-()]{6,}\d'
    r'|\(\d{2,5}\)\s*\d{3,4}[\s\-]?\d{3,4}'
    r'|\b\d{3,5}-\d{3,4}(?:-\d{3,4})?\b'
)

_RECEIPT_KW = re.compile(
    r'\b(?:receipt|invoice|order|bill|challan)\b',
    re.IGNORECASE,
)

_RECEIPT_ID = re.compile(
    r'\b(?:receipt|invoice|order|bill|challan)\b\.?'
    r'(?:\s*(?:no|number|id|#)\b\.?)?'
    r'\s*[:#\-]?\s*'
    r'(?=[A-Za-z\-/]*\d)([A-Za-z0-9][A-Za-z0-9\-/]*)',
    re.IGNORECASE,
)

_DATE_LABEL = re.compile(r'\b(?:date|dated)\b', re.IGNORECASE)

_EXPIRY_LABEL = re.compile(r'\b(?:exp(?:iry|ires|iration)?|mfg|manufactured)\b', re.IGNORECASE)

_PATIENT_KW = re.compile(r'\b(?:patient|pt|name)\b\.?', re.IGNORECASE)

_HEADER_NAME = re.compile(
    r'\b(?:item|items|product|products|medicine|medicines|drug|drugs|'
    r'description|particulars|name)\b',
    re.IGNORECASE,
)
_HEADER_QTY = re.compile(r'\b(?:qty|quantity|qnty|units?)\b', re.IGNORECASE)
_HEADER_PRICE = re.compile(r'\b(?:price|rate|amount|amt|mrp|cost|total)\b', re.IGNORECASE)

_SUMMARY = re.compile(
    r'^\s*(?:sub\s*-?\s*total|grand\s+total|total|net\s+(?:amount|total|payable)|'
    r'amount\s+(?:due|payable)|tax|gst|cgst|sgst|vat|discount|balance|'
    r'round(?:ing)?\s*off)\b',
    re.IGNORECASE,
)

# Text after a keyword: drop "Name", "No.", "#" and the ":" / "-" separator
_VALUE_PREFIX = re.compile(
    r'^[\s.]*(?:(?:name|no|number|id|details?)\b\.?|#)?\s*[:#\-–=|]*\s*',
    re.IGNORECASE,
)


def value_after(line: str, keyword: re.Pattern) -> Optional[str]:
    """
    Return the value that follows a keyword on a metadata line.

    "Distributor: Acme Pharma"   → "Acme Pharma"
    "Supplier Name - XYZ Ltd"    → "XYZ Ltd"
    "Phone No. 9876543210"       → "9876543210"
    """
    m = keyword.search(line or '')
    if not m:
        return None
    value = _VALUE_PREFIX.sub('', line[m.end():], count=1).strip()
    return value or None


def distributor_name(line: str) -> Optional[str]:
    return value_after(line, _DISTRIBUTOR_KW)


def contact_value(line: str) -> Optional[str]:
    """Contact text after the keyword, or the bare phone number on the line."""
    value = value_after(line, _CONTACT_KW)
    if value:
        return value
    m = _PHONE.search(line or '')
    return m.group(0).strip() if m else None


def patient_name(line: str) -> Optional[str]:
    return value_after(line, _PATIENT_KW)


def receipt_id(line: str) -> Optional[str]:
    m = _RECEIPT_ID.search(line or '')
    return m.group(1) if m else None


def is_list_header(line: str) -> bool:
    if re.search(r'\d', line):
        return False
    return bool(
        _HEADER_NAME.search(line)
        and _HEADER_QTY.search(line)
        and _HEADER_PRICE.search(line)
    )


class LineClassifier:
    """
    Classify document lines for the receipt and prescription parsers.

    Usage
    -----
    classifier = LineClassifier(patient_mode=False)
    tagged = classifier.classify(lines)
    """

    def __init__(self, patient_mode: bool = False):
        self.patient_mode = patient_mode

    def classify(self, lines: List[str]) -> List[ClassifiedLine]:
        tagged: List[ClassifiedLine] = []
        in_list = False

        for index, line in enumerate(lines):
            category = self._category(line, in_list)
            if category is LineCategory.LIST_HEADER:
                in_list = True
            tagged.append(ClassifiedLine(index=index, text=line, category=category))

        logger.debug(
            f"[LineClassifier] {len(tagged)} lines, header_seen={in_list}, "
            f"candidates={sum(1 for t in tagged if t.category is LineCategory.PRODUCT_CANDIDATE)}"
        )
        return tagged

    def _category(self, line: str, in_list: bool) -> LineCategory:
        has_receipt_kw = bool(_RECEIPT_KW.search(line))
        has_date_label = bool(_DATE_LABEL.search(line))

        if _DISTRIBUTOR_KW.search(line):
            return LineCategory.DISTRIBUTOR_META

        if _CONTACT_KW.search(line):
            return LineCategory.CONTACT_META
        if not in_list and not has_receipt_kw and _PHONE.search(line):
            return LineCategory.CONTACT_META

        if has_receipt_kw and not has_date_label:
            return LineCategory.RECEIPT_ID_META

        if has_date_label and not _EXPIRY_LABEL.search(line) and find_dates(line):
            return LineCategory.DATE_META

        if is_list_header(line):
            return LineCategory.LIST_HEADER

        if self.patient_mode and _PATIENT_KW.search(line):
            return LineCategory.PATIENT_META

        if in_list:
            if _SUMMARY.search(line):
                return LineCategory.SUMMARY
            return LineCategory.PRODUCT_CANDIDATE

        return LineCategory.UNCLASSIFIED
