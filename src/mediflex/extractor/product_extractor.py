"""
Product Label Extractor
=======================
Handles a single product photographed on its own (a strip, a box, a label).
There is no list here, so lines are not classified: every field is taken
from the first line that carries it.

  batch   first "batch" / "lot" code
  expiry  date after an EXP keyword, else the first date in the text
  price   first currency amount
  name    first plausible name line with no date, price or batch on it,
          else the text left over on the first line that has some
"""

from typing import List

from mediflex.extractor.base_extractor import BaseExtractor
from mediflex.extractor.fields import (
    extract_batch,
    extract_date,
    extract_expiry,
    extract_fields,
    extract_price,
    has_expiry_keyword,
    is_candidate_name,
)
from mediflex.models import SingleProductGuess


class ProductLabelExtractor(BaseExtractor):

    def _assemble(self, lines: List[str]) -> SingleProductGuess:
        guess = SingleProductGuess()

        guess.batch = next(filter(None, (extract_batch(l) for l in lines)), None)
        guess.price = next(filter(None, (extract_price(l) for l in lines)), 0.0)

        keyword_lines = [l for l in lines if has_expiry_keyword(l)]
        guess.expiry = next(filter(None, (extract_expiry(l) for l in keyword_lines)), None)
        if guess.expiry is None:
            guess.expiry = next(filter(None, (extract_date(l) for l in lines)), None)

        guess.name = self._name(lines)
        return guess

    def _name(self, lines: List[str]) -> str:
        for line in lines:
            if extract_price(line) is not None or extract_batch(line):
                continue
            if is_candidate_name(line, self.name_min_length, self.name_max_length):
                return line

        for line in lines:
            residual = extract_fields(line).name
            if residual and is_candidate_name(residual, self.name_min_length, self.name_max_length):
                return residual
        return ""

    def _describe(self, result: SingleProductGuess) -> str:
        return f"name='{result.name}' price={result.price} expiry={result.expiry}"
