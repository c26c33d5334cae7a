"""
Field Extractors
================
Line-level extractors for the values printed on pharmacy documents:
  - dates           (D/M/Y, normalized to YYYY-MM-DD)
  - expiry dates    (date after an EXP keyword, or MM/YYYY)
  - prices          ($ £ € ₹, "," or "." decimal separator)
  - quantities      (qty label, "x 5", or first bare integer)
  - batch / lot     (loose and strict receipt variants)
  - product names   (whatever text is left over)

Every function here is total: malformed input gives None, never an exception.

Tie-break between fields
------------------------
Dates and batch codes are located first, then prices, then quantities.
Each step ignores text already consumed by an earlier one, so "4.50" is
always a price and never the quantity 4, and "15.01.2023" is never a price.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Optional, Tuple

Span = Tuple[int, int]

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 50


# ─── Patterns ─────────────────────────────────────────────────────────────────

# 15/01/2023  5-3-24  05.03.2024, read positionally as day / month / year
_DATE = re.compile(r'(?<!\d)(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2,4})(?!\d)')

_EXPIRY_KEYWORD = re.compile(
    r'\b(?:exp(?:iry|ires|iration)?|use\s+before|best\s+before)\b\.?'
    r'(?:\s*date)?\s*[:\-]?\s*',
    re.IGNORECASE,
)

# 12/2025  03-26, only meaningful directly after an expiry keyword
_MONTH_YEAR = re.compile(r'(\d{1,2})[/\-.](\d{2,4})(?!\d)')

# Dosage units that turn "0.5" or "500" into a strength, not a price/quantity
_UNIT_AHEAD = r'(?!\s*(?:mg|mcg|µg|ml|gm?|kg|l|iu)\b)(?!\s*%)'

_PRICE = re.compile(
    r'(?:(?P<symbol>[$£€₹]|\b(?:rs|inr|usd|eur|gbp)\b\.?)\s*|(?<![\w.,]))'
    r'(?P<amount>\d{1,3}(?:,\d{3})+\.\d{1,2}|\d+[.,]\d{1,2})'
    r'(?!\d)(?![.,]\d)' + _UNIT_AHEAD,
    re.IGNORECASE,
)

_QTY_LABEL = re.compile(r'\b(?:qty|quantity|qnty)\b\.?\s*[:\-=]?\s*(\d{1,6})\b', re.IGNORECASE)
_TIMES_QTY = re.compile(r'(?<![A-Za-z])[xX×]\s*(\d{1,6})\b')
_BARE_INT  = re.compile(r'\b(\d{1,6})\b' + _UNIT_AHEAD, re.IGNORECASE)

_BATCH_LOOSE = re.compile(
    r'\b(?:batch|lot)\b'
    r'(?:\s*(?:no|number|#)\.?(?=[\s:#.\-]))?'
    r'\s*[:#.\-]?\s*'
    r'(?=[A-Za-z]*\d)([A-Za-z0-9]{5,})',
    re.IGNORECASE,
)

_BATCH_STRICT = re.compile(
    r'(?:\b(?:batch|lot)(?:\s*no\.?)?|\bb/no)\s*:\s*([A-Za-z0-9][A-Za-z0-9\-/]*)',
    re.IGNORECASE,
)

_NAME_EXCLUDED = re.compile(r'\b(?:batch|lot|exp|expiry|expires|price)\b', re.IGNORECASE)

_EDGE_JUNK = ' \t-–:;,|@*#=/'


# ─── Match types ──────────────────────────────────────────────────────────────

class PriceMatch(NamedTuple):
    value: float
    span: Span


class QuantityMatch(NamedTuple):
    value: int
    span: Span


class TextMatch(NamedTuple):
    value: str
    span: Span


@dataclass
class LineFields:
    """Everything the extractors found on one line."""
    text: str
    price: Optional[PriceMatch] = None
    quantity: Optional[QuantityMatch] = None
    batch: Optional[TextMatch] = None
    expiry: Optional[TextMatch] = None
    name: Optional[str] = None
    consumed: List[Span] = field(default_factory=list)


# ─── Span helpers ─────────────────────────────────────────────────────────────

def mask_spans(line: str, spans: Iterable[Span]) -> str:
    """Blank out consumed spans with spaces, keeping character offsets."""
    chars = list(line)
    for start, end in spans:
        for i in range(max(start, 0), min(end, len(chars))):
            chars[i] = ' '
    return ''.join(chars)


def strip_spans(line: str, spans: Iterable[Span]) -> str:
    """Remove consumed spans and tidy the whitespace / separators left behind."""
    residual = mask_spans(line, spans)
    residual = re.sub(r'\s+', ' ', residual)
    return residual.strip(_EDGE_JUNK).strip()


def has_letters(text: str) -> bool:
    return any(ch.isalpha() for ch in text)


# ─── Dates ────────────────────────────────────────────────────────────────────

def normalize_date(day: str, month: str, year: str) -> str:
    """
    Build YYYY-MM-DD from positional parts.

    Two-digit years are taken as 20YY. The calendar is NOT validated:
    "31/02/2024" becomes "2024-02-31".
    """
    if len(year) == 2:
        year = f"20{year}"
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def find_dates(line: str) -> List[TextMatch]:
    return [
        TextMatch(normalize_date(m.group(1), m.group(2), m.group(3)), m.span())
        for m in _DATE.finditer(line)
    ]


def extract_date(line: str) -> Optional[str]:
    """First D/M/Y date on the line as YYYY-MM-DD, or None."""
    m = _DATE.search(line or '')
    if not m:
        return None
    return normalize_date(m.group(1), m.group(2), m.group(3))


def find_expiry(line: str) -> Optional[TextMatch]:
    """
    Expiry date with the span it occupies.

    Priority: full date after an expiry keyword, MM/YYYY after an expiry
    keyword (day set to 01), then the first full date anywhere on the line.
    """
    kw = _EXPIRY_KEYWORD.search(line)
    if kw:
        m = _DATE.search(line, kw.end())
        if m:
            value = normalize_date(m.group(1), m.group(2), m.group(3))
            return TextMatch(value, (kw.start(), m.end()))
        m = _MONTH_YEAR.match(line, kw.end())
        if m:
            year = m.group(2)
            if len(year) == 2:
                year = f"20{year}"
            elif len(year) == 3:
                year = None
            if year:
                return TextMatch(f"{year}-{m.group(1).zfill(2)}-01", (kw.start(), m.end()))

    dates = find_dates(line)
    return dates[0] if dates else None


def has_expiry_keyword(line: str) -> bool:
    return bool(_EXPIRY_KEYWORD.search(line or ''))


def extract_expiry(line: str) -> Optional[str]:
    found = find_expiry(line or '')
    return found.value if found else None


# ─── Prices ───────────────────────────────────────────────────────────────────

def normalize_amount(raw: str) -> Optional[float]:
    """
    "12,50" → 12.5   "1,234.56" → 1234.56   "₹99.00" → 99.0
    """
    cleaned = re.sub(r'[$£€₹\s]', '', raw or '')
    if ',' in cleaned and '.' in cleaned:
        cleaned = cleaned.replace(',', '')
    else:
        cleaned = cleaned.replace(',', '.')
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if value < 0:
        return None
    return round(value, 2)


def find_price(line: str, consumed: Iterable[Span] = ()) -> Optional[PriceMatch]:
    """First currency amount not inside a consumed span (dates are always skipped)."""
    spans = list(consumed) + [d.span for d in find_dates(line)]
    masked = mask_spans(line, spans)
    for m in _PRICE.finditer(masked):
        value = normalize_amount(m.group('amount'))
        if value is not None:
            return PriceMatch(value, m.span())
    return None


def extract_price(line: str) -> Optional[float]:
    found = find_price(line or '')
    return found.value if found else None


# ─── Quantities ───────────────────────────────────────────────────────────────

def find_quantity(line: str, consumed: Iterable[Span] = ()) -> Optional[QuantityMatch]:
    """
    Quantity outside the consumed spans.

    A labelled "Qty: 5" or "x 5" wins; otherwise the first bare integer
    token that is not a dosage strength. Zero counts as unparsed.
    """
    masked = mask_spans(line, consumed)
    for pattern in (_QTY_LABEL, _TIMES_QTY, _BARE_INT):
        m = pattern.search(masked)
        if m:
            value = int(m.group(1))
            if value < 1:
                return None
            return QuantityMatch(value, m.span())
    return None


def find_times_quantities(line: str) -> List[Span]:
    """Spans of every "x <n>" pattern on the line."""
    return [m.span() for m in _TIMES_QTY.finditer(line)]


# ─── Batch / lot ──────────────────────────────────────────────────────────────

def find_batch(line: str, strict: bool = False) -> Optional[TextMatch]:
    pattern = _BATCH_STRICT if strict else _BATCH_LOOSE
    m = pattern.search(line)
    if not m:
        return None
    value = m.group(1).strip('-/')
    if not value:
        return None
    return TextMatch(value, m.span())


def extract_batch(line: str, strict: bool = False) -> Optional[str]:
    found = find_batch(line or '', strict=strict)
    return found.value if found else None


# ─── Names ────────────────────────────────────────────────────────────────────

def is_candidate_name(
    line: str,
    min_length: int = NAME_MIN_LENGTH,
    max_length: int = NAME_MAX_LENGTH,
) -> bool:
    """A plausible product/patient name: sensible length, letters, no label keywords."""
    s = (line or '').strip()
    if not (min_length < len(s) < max_length):
        return False
    if not has_letters(s):
        return False
    if _NAME_EXCLUDED.search(s):
        return False
    if _DATE.search(s):
        return False
    return True


# ─── Whole line ───────────────────────────────────────────────────────────────

def extract_fields(line: str, strict_batch: bool = False) -> LineFields:
    """
    Run every field extractor over one line.

    The residual text, once dates, batch, price and quantity are removed,
    becomes the name when it still contains letters.
    """
    text = (line or '').strip()
    fields = LineFields(text=text)

    consumed: List[Span] = [d.span for d in find_dates(text)]

    fields.expiry = find_expiry(text)
    if fields.expiry:
        consumed.append(fields.expiry.span)

    fields.batch = find_batch(text, strict=strict_batch)
    if fields.batch:
        consumed.append(fields.batch.span)

    fields.price = find_price(text, consumed)
    if fields.price:
        consumed.append(fields.price.span)

    fields.quantity = find_quantity(text, consumed)
    if fields.quantity:
        consumed.append(fields.quantity.span)

    residual = strip_spans(text, consumed)
    fields.name = residual if has_letters(residual) else None
    fields.consumed = consumed
    return fields
