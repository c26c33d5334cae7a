"""
Data Models - extraction results and stored records
Using Pydantic for validation and JSON serialization

Extraction results
------------------
ExtractedProduct / Medicine   one product row pulled out of a document
PatientRecipient              patient + prescribed medicines
OrderReceiptData              distributor order receipt
SingleProductGuess            best guess from a single label photograph

Stored records
--------------
InventoryItem, Distributor, DistributionProduct, Buyer, BuyerPurchase,
RecentActivity, DashboardStat
"""

from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


# ─── Line classification ──────────────────────────────────────────────────────

class LineCategory(str, Enum):
    """What a single line of OCR text most likely represents."""
    DISTRIBUTOR_META  = "distributor_meta"
    CONTACT_META      = "contact_meta"
    PATIENT_META      = "patient_meta"
    RECEIPT_ID_META   = "receipt_id_meta"
    DATE_META         = "date_meta"
    LIST_HEADER       = "list_header"
    SUMMARY           = "summary"
    PRODUCT_CANDIDATE = "product_candidate"
    UNCLASSIFIED      = "unclassified"


class ClassifiedLine(BaseModel):
    """A trimmed line of text tagged with its category."""
    index: int            = Field(..., description="Position in the document", ge=0)
    text: str             = Field(..., description="Trimmed line text")
    category: LineCategory = Field(..., description="Assigned category")


# ─── Extraction results ───────────────────────────────────────────────────────

class ExtractedProduct(BaseModel):
    """A product row extracted from a document."""
    name: str              = Field(..., min_length=1, description="Product name")
    quantity: int          = Field(1, ge=1, description="Quantity (defaults to 1)")
    price: float           = Field(0.0, ge=0, description="Unit price (defaults to 0)")
    batch: Optional[str]   = Field(None, description="Batch / lot code")
    expiry: Optional[str]  = Field(None, description="Expiry date, YYYY-MM-DD")


class Medicine(ExtractedProduct):
    """A medicine on a patient prescription."""


class PatientRecipient(BaseModel):
    """Patient details and the medicines listed for them."""
    name: str                = Field("", description="Patient name")
    contact: Optional[str]   = Field(None, description="Patient contact")
    medicines: List[Medicine] = Field(default_factory=list)


class OrderReceiptData(BaseModel):
    """Structured data from a distributor order receipt."""
    distributor_name: Optional[str]    = None
    distributor_contact: Optional[str] = None
    receipt_id: Optional[str]          = None
    date: str                          = Field(..., description="Receipt date, YYYY-MM-DD")
    products: List[ExtractedProduct]   = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "distributor_name": "Acme Pharma",
                "distributor_contact": "+1 555-1234",
                "receipt_id": "INV-001",
                "date": "2024-03-05",
                "products": [
                    {"name": "Paracetamol 500mg", "quantity": 100, "price": 4.5,
                     "batch": None, "expiry": None},
                ],
            }
        }


class SingleProductGuess(BaseModel):
    """Partial product record read from a single label."""
    name: str              = ""
    batch: Optional[str]   = None
    expiry: Optional[str]  = None
    price: float           = Field(0.0, ge=0)
    quantity: int          = Field(1, ge=1)


# ─── Inventory ────────────────────────────────────────────────────────────────

class NewInventoryItem(BaseModel):
    name: str
    expiry: str
    batch: str
    price: float = Field(0.0, ge=0)
    stock: int   = Field(0, ge=0)


class InventoryItem(NewInventoryItem):
    id: int


# ─── Distributors ─────────────────────────────────────────────────────────────

class NewDistributionProduct(BaseModel):
    name: str
    date: str
    quantity: int                 = Field(1, ge=1)
    price: float                  = Field(0.0, ge=0)
    receipt_id: Optional[str]     = None
    batch_number: Optional[str]   = None
    expiry_date: Optional[str]    = None


class DistributionProduct(NewDistributionProduct):
    id: int


class Distributor(BaseModel):
    id: int
    name: str
    contact: str                        = ""
    address: str                        = ""
    products: List[DistributionProduct] = Field(default_factory=list)


# ─── Regular buyers ───────────────────────────────────────────────────────────

class NewBuyerPurchase(BaseModel):
    medicine: str
    date: str
    quantity: int = Field(1, ge=1)
    price: float  = Field(0.0, ge=0)


class BuyerPurchase(NewBuyerPurchase):
    id: int


class Buyer(BaseModel):
    id: int
    name: str
    contact: str                  = ""
    notes: str                    = ""
    purchases: List[BuyerPurchase] = Field(default_factory=list)


# ─── Dashboard ────────────────────────────────────────────────────────────────

ActivityType = Literal["barcode", "ocr", "distribution", "report"]


class RecentActivity(BaseModel):
    type: ActivityType
    title: str
    timestamp: datetime


class DashboardStat(BaseModel):
    title: str
    value: str
    description: str
