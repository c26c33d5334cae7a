"""
Order Receipt Extractor
=======================
Distributor order receipts. Metadata block first (distributor, contact,
receipt number, date), then the product table.

Batch codes are only taken from explicit "Batch:" / "Lot:" / "B/No:" labels
here, since receipt rows often carry long alphanumeric SKU columns.

Date
  1. first date on a "Date:" line
  2. else the first date on any metadata line above the table
  3. else today
"""

from datetime import date
from typing import List, Optional

from mediflex.extractor.base_extractor import BaseExtractor
from mediflex.extractor.fields import extract_date
from mediflex.extractor.line_classifier import contact_value, distributor_name, receipt_id
from mediflex.models import ClassifiedLine, LineCategory, OrderReceiptData

_PRE_LIST = (
    LineCategory.DISTRIBUTOR_META,
    LineCategory.CONTACT_META,
    LineCategory.RECEIPT_ID_META,
    LineCategory.DATE_META,
    LineCategory.UNCLASSIFIED,
)


class OrderReceiptExtractor(BaseExtractor):

    strict_batch = True

    def _assemble(self, lines: List[str]) -> OrderReceiptData:
        classified = self.classifier.classify(lines)

        return OrderReceiptData(
            distributor_name=self._first(classified, LineCategory.DISTRIBUTOR_META, distributor_name),
            distributor_contact=self._first(classified, LineCategory.CONTACT_META, contact_value),
            receipt_id=self._receipt_id(classified),
            date=self._date(classified),
            products=self._records(classified, lines),
        )

    @staticmethod
    def _first(classified: List[ClassifiedLine], category: LineCategory, getter) -> Optional[str]:
        for line in classified:
            if line.category is category:
                value = getter(line.text)
                if value:
                    return value
        return None

    def _receipt_id(self, classified: List[ClassifiedLine]) -> Optional[str]:
        # "Invoice No: 123  Date: 05/03/2024" is tagged as a date line
        found = self._first(classified, LineCategory.RECEIPT_ID_META, receipt_id)
        if found is None:
            found = self._first(classified, LineCategory.DATE_META, receipt_id)
        return found

    def _date(self, classified: List[ClassifiedLine]) -> str:
        found = self._first(classified, LineCategory.DATE_META, extract_date)
        if found:
            return found

        for line in classified:
            if line.category is LineCategory.LIST_HEADER:
                break
            if line.category in _PRE_LIST:
                found = extract_date(line.text)
                if found:
                    return found

        return date.today().isoformat()

    def _describe(self, result: OrderReceiptData) -> str:
        return (
            f"distributor='{result.distributor_name}' receipt={result.receipt_id} "
            f"date={result.date} products={len(result.products)}"
        )
