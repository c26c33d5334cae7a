"""
Shared fixtures for the MediFlex test suite
"""

import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mediflex.services import (  # noqa: E402
    BuyerService,
    DashboardService,
    DistributorService,
    InventoryService,
    MemoryStorage,
)


ORDER_RECEIPT_TEXT = (
    "Distributor: Acme Pharma\n"
    "Contact: +1 555-1234\n"
    "Receipt: INV-001\n"
    "Item Qty Price\n"
    "Paracetamol 500mg 100 4.50\n"
    "Ibuprofen 200mg 50 3.20"
)

PRESCRIPTION_TEXT = (
    "City Care Clinic\n"
    "Patient Name: John Doe\n"
    "Contact: 9876543210\n"
    "Medicine Qty Price\n"
    "Amoxicillin 500mg 10 5.00\n"
    "Cough Syrup 1 85.50\n"
)

LABEL_TEXT = (
    "Paracetamol 500mg\n"
    "Batch No: AB12345\n"
    "Exp: 12/2025\n"
    "MRP: ₹45.00\n"
)


@pytest.fixture
def storage():
    """Fresh in-memory store for each test"""
    return MemoryStorage()


@pytest.fixture
def dashboard(storage):
    return DashboardService(storage)


@pytest.fixture
def inventory(storage):
    return InventoryService(storage)


@pytest.fixture
def distributors(storage, dashboard):
    return DistributorService(storage, dashboard=dashboard)


@pytest.fixture
def buyers(storage, dashboard):
    return BuyerService(storage, dashboard=dashboard)
