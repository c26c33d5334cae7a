"""
Fallback Scanner
================
Second, looser pass used only when the accumulator closed no records
(typically a document whose list header was not recognised).

Every line is scanned independently. A line becomes one product when it
carries a price and is longer than ``min_length`` characters once trimmed.
The name is what is left after the price, any "x <n>" and the quantity are
stripped out; when nothing readable is left, the trimmed line is the name.
Recall is favoured over precision.
"""

from typing import List, Type

from loguru import logger

from mediflex.extractor.fields import (
    find_batch,
    find_dates,
    find_expiry,
    find_price,
    find_quantity,
    find_times_quantities,
    has_letters,
    strip_spans,
)
from mediflex.models import ExtractedProduct


class FallbackScanner:

    def __init__(self, min_length: int = 10, strict_batch: bool = False):
        self.min_length = min_length
        self.strict_batch = strict_batch

    def scan(
        self,
        lines: List[str],
        record_model: Type[ExtractedProduct] = ExtractedProduct,
    ) -> List[ExtractedProduct]:
        records: List[ExtractedProduct] = []

        for raw in lines:
            line = (raw or '').strip()
            if len(line) <= self.min_length:
                continue

            consumed = [d.span for d in find_dates(line)]
            expiry = find_expiry(line)
            if expiry:
                consumed.append(expiry.span)
            batch = find_batch(line, strict=self.strict_batch)
            if batch:
                consumed.append(batch.span)

            price = find_price(line, consumed)
            if price is None:
                continue
            consumed.append(price.span)

            times = find_times_quantities(line)
            quantity = find_quantity(line, consumed)
            consumed.extend(times)
            if quantity:
                consumed.append(quantity.span)

            name = strip_spans(line, consumed)
            if not has_letters(name):
                name = line

            records.append(record_model(
                name=name,
                quantity=quantity.value if quantity else 1,
                price=price.value,
                batch=batch.value if batch else None,
                expiry=expiry.value if expiry else None,
            ))
            logger.debug(f"[FallbackScanner] line accepted: '{line}' → '{name}'")

        if records:
            logger.info(f"[FallbackScanner] recovered {len(records)} records")
        return records
