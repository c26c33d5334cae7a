"""
Product Accumulator
===================
Folds the product-candidate lines that follow a list header into closed
product records, holding exactly one in-progress record at a time.

Transition rules (per line)
───────────────────────────
  price found
      name known   → attach price (+ qty / batch / expiry on the line), emit;
                     a bare name followed by a full row (name, qty, price)
                     is closed on its own and the row becomes its own record
      no name      → residual text becomes the name and the record is emitted;
                     with no residual the price waits for a name line
  quantity found (no price)
      no name      → store qty, residual text is a tentative name
      name known   → a new name on the line closes the current record;
                     otherwise the qty is attached
  neither
      no name      → a batch / expiry line right after a closed record fills
                     that record's missing fields; otherwise the line is the
                     name (emitted at once if a price waits)
      name known   → detail line: batch / expiry only, record stays open

A summary line (TOTAL, TAX, ...) ends the list. At end of stream a named
record is emitted with qty 1 / price 0 for anything still unset.
"""

from dataclasses import dataclass
from typing import List, Optional, Type

from loguru import logger

from mediflex.extractor.fields import (
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    LineFields,
    extract_fields,
    is_candidate_name,
)
from mediflex.models import ClassifiedLine, ExtractedProduct, LineCategory


@dataclass
class _PartialRecord:
    name: str = ""
    quantity: Optional[int] = None
    price: Optional[float] = None
    batch: Optional[str] = None
    expiry: Optional[str] = None

    def absorb(self, fields: LineFields):
        """Take batch / expiry from the line when not known yet."""
        if fields.batch and not self.batch:
            self.batch = fields.batch.value
        if fields.expiry and not self.expiry:
            self.expiry = fields.expiry.value

    def take_quantity(self, fields: LineFields):
        if fields.quantity and self.quantity is None:
            self.quantity = fields.quantity.value

    def is_empty(self) -> bool:
        return (
            not self.name
            and self.quantity is None
            and self.price is None
            and self.batch is None
            and self.expiry is None
        )


class ProductAccumulator:
    """
    Build ordered product records from classified lines.

    A fresh accumulator holds no state between calls to ``accumulate``.
    """

    def __init__(
        self,
        record_model: Type[ExtractedProduct] = ExtractedProduct,
        strict_batch: bool = False,
        name_min_length: int = NAME_MIN_LENGTH,
        name_max_length: int = NAME_MAX_LENGTH,
    ):
        self.record_model = record_model
        self.strict_batch = strict_batch
        self.name_min_length = name_min_length
        self.name_max_length = name_max_length

    def accumulate(self, lines: List[ClassifiedLine]) -> List[ExtractedProduct]:
        records: List[ExtractedProduct] = []
        current = _PartialRecord()

        for line in lines:
            if line.category is LineCategory.SUMMARY:
                break
            if line.category is not LineCategory.PRODUCT_CANDIDATE:
                continue

            fields = extract_fields(line.text, strict_batch=self.strict_batch)

            if fields.price is not None:
                current = self._on_price(current, fields, records)
            elif fields.quantity is not None:
                current = self._on_quantity(current, fields, records)
            elif current.is_empty() and records and self._is_detail_line(fields):
                records[-1] = self._complete(records[-1], fields)
            elif not current.name:
                current.absorb(fields)
                if fields.name:
                    current.name = fields.name
                    if current.price is not None:
                        current = self._emit(current, records)
            else:
                current.absorb(fields)

        if current.name:
            self._emit(current, records)
        elif not current.is_empty():
            logger.debug("[ProductAccumulator] dropped unnamed trailing record")

        logger.debug(f"[ProductAccumulator] {len(records)} records closed")
        return records

    # ── Transitions ───────────────────────────────────────────────────────────

    def _is_detail_line(self, fields: LineFields) -> bool:
        """Batch and/or expiry with no usable name next to them."""
        if not (fields.batch or fields.expiry):
            return False
        return not fields.name or not is_candidate_name(fields.name, self.name_min_length, self.name_max_length)

    def _complete(self, record: ExtractedProduct, fields: LineFields) -> ExtractedProduct:
        update = {}
        if fields.batch and not record.batch:
            update['batch'] = fields.batch.value
        if fields.expiry and not record.expiry:
            update['expiry'] = fields.expiry.value
        if update:
            logger.debug(f"[ProductAccumulator] '{record.name}' completed with {update}")
        return record.model_copy(update=update)

    def _starts_new_row(self, current: _PartialRecord, fields: LineFields) -> bool:
        return (
            current.quantity is None
            and current.price is None
            and fields.quantity is not None
            and bool(fields.name)
            and is_candidate_name(fields.name, self.name_min_length, self.name_max_length)
        )

    def _on_price(self, current: _PartialRecord, fields: LineFields, records: List) -> _PartialRecord:
        if current.name and self._starts_new_row(current, fields):
            current = self._emit(current, records)

        if current.name:
            current.price = fields.price.value
            current.take_quantity(fields)
            current.absorb(fields)
            return self._emit(current, records)

        current.price = fields.price.value
        current.take_quantity(fields)
        current.absorb(fields)
        if fields.name:
            current.name = fields.name
            return self._emit(current, records)
        return current

    def _on_quantity(self, current: _PartialRecord, fields: LineFields, records: List) -> _PartialRecord:
        if not current.name:
            current.take_quantity(fields)
            current.absorb(fields)
            if fields.name:
                current.name = fields.name
                if current.price is not None:
                    return self._emit(current, records)
            return current

        if fields.name and is_candidate_name(fields.name, self.name_min_length, self.name_max_length):
            self._emit(current, records)
            current = _PartialRecord(name=fields.name)
            current.take_quantity(fields)
            current.absorb(fields)
            return current

        current.take_quantity(fields)
        current.absorb(fields)
        return current

    def _emit(self, current: _PartialRecord, records: List) -> _PartialRecord:
        records.append(self.record_model(
            name=current.name,
            quantity=current.quantity or 1,
            price=current.price if current.price is not None else 0.0,
            batch=current.batch,
            expiry=current.expiry,
        ))
        return _PartialRecord()
