"""
Tests for the three document parsers and the ExtractorFactory
"""

from datetime import date

import pytest

from conftest import LABEL_TEXT, ORDER_RECEIPT_TEXT, PRESCRIPTION_TEXT
from mediflex.extractor import (
    ExtractorFactory,
    parse_order_receipt,
    parse_patient_medicines,
    parse_single_product,
)
from mediflex.extractor.order_receipt_extractor import OrderReceiptExtractor
from mediflex.extractor.patient_extractor import PatientMedicineExtractor
from mediflex.extractor.product_extractor import ProductLabelExtractor
from mediflex.models import Medicine, OrderReceiptData, PatientRecipient, SingleProductGuess

NOISE = [
    "",
    "   \n\t  \n",
    "@@@@ #### !!!!",
    "1.1.1.1\n///\n---",
    "Item Qty Price",
    "Item Qty Price\nTotal 0.00",
    "x x x 0 0 0 $ $ $",
    "Qty: 0 Price: -4.50",
    "9" * 5000,
    "Distributor:\nContact:\nReceipt:\nDate:",
]


# ─── Order receipts ───────────────────────────────────────────────────────────

def test_order_receipt_example():
    receipt = parse_order_receipt(ORDER_RECEIPT_TEXT)

    assert receipt.distributor_name == "Acme Pharma"
    assert "555-1234" in receipt.distributor_contact
    assert receipt.receipt_id == "INV-001"

    assert [(p.name, p.quantity, p.price) for p in receipt.products] == [
        ("Paracetamol 500mg", 100, pytest.approx(4.50)),
        ("Ibuprofen 200mg", 50, pytest.approx(3.20)),
    ]


def test_order_receipt_date_from_date_line():
    receipt = parse_order_receipt("Date: 5/3/24\n" + ORDER_RECEIPT_TEXT)
    assert receipt.date == "2024-03-05"


def test_order_receipt_date_from_other_metadata_line():
    receipt = parse_order_receipt("Invoice INV-77 15-01-2023\nItem Qty Price\nPanadol 2 3.00")
    assert receipt.date == "2023-01-15"
    assert receipt.receipt_id == "INV-77"


def test_order_receipt_date_defaults_to_today():
    assert parse_order_receipt(ORDER_RECEIPT_TEXT).date == date.today().isoformat()


def test_order_receipt_id_on_shared_date_line():
    receipt = parse_order_receipt("Invoice No: 4521 Date: 05/03/2024\nItem Qty Price\nPanadol 2 3.00")
    assert receipt.receipt_id == "4521"
    assert receipt.date == "2024-03-05"


def test_order_receipt_strict_batch():
    text = (
        "Supplier: Medline\n"
        "Product Qty Rate\n"
        "Amoxicillin 250mg\n"
        "Batch: AMX-2291\n"
        "Expiry: 01/03/2026\n"
        "20 11.40\n"
    )
    receipt = parse_order_receipt(text)
    assert len(receipt.products) == 1
    product = receipt.products[0]
    assert product.name == "Amoxicillin 250mg"
    assert product.batch == "AMX-2291"
    assert product.expiry == "2026-03-01"
    assert product.quantity == 20
    assert product.price == pytest.approx(11.40)


def test_order_receipt_without_header_uses_fallback():
    receipt = parse_order_receipt("Acme Pharma\nParacetamol 500mg 4.50\nok")
    assert len(receipt.products) >= 1
    assert receipt.products[0].price == pytest.approx(4.50)


def test_order_receipt_empty():
    receipt = parse_order_receipt("")
    assert isinstance(receipt, OrderReceiptData)
    assert receipt.products == []
    assert receipt.distributor_name is None
    assert receipt.date == date.today().isoformat()


# ─── Prescriptions ────────────────────────────────────────────────────────────

def test_patient_medicines():
    patient = parse_patient_medicines(PRESCRIPTION_TEXT)

    assert patient.name == "John Doe"
    assert patient.contact == "9876543210"
    assert [(m.name, m.quantity, m.price) for m in patient.medicines] == [
        ("Amoxicillin 500mg", 10, pytest.approx(5.00)),
        ("Cough Syrup", 1, pytest.approx(85.50)),
    ]
    assert all(isinstance(m, Medicine) for m in patient.medicines)


def test_patient_name_from_unlabelled_line():
    patient = parse_patient_medicines("Jane Smith\nMedicine Qty Price\nCetirizine 10mg 1 2.00")
    assert patient.name == "Jane Smith"


def test_patient_medicines_pick_up_detail_lines():
    text = (
        "Patient: Ravi Kumar\n"
        "Medicine Qty Price\n"
        "Metformin 500mg 30\n"
        "Batch No: MF20931 Exp: 08/2026\n"
        "Price: 62.00\n"
    )
    medicine = parse_patient_medicines(text).medicines[0]
    assert medicine.name == "Metformin 500mg"
    assert medicine.quantity == 30
    assert medicine.batch == "MF20931"
    assert medicine.expiry == "2026-08-01"
    assert medicine.price == pytest.approx(62.00)


def test_patient_empty():
    patient = parse_patient_medicines(None)
    assert isinstance(patient, PatientRecipient)
    assert patient.name == ""
    assert patient.contact is None
    assert patient.medicines == []


# ─── Single product ───────────────────────────────────────────────────────────

def test_single_product_label():
    guess = parse_single_product(LABEL_TEXT)
    assert isinstance(guess, SingleProductGuess)
    assert guess.name == "Paracetamol 500mg"
    assert guess.batch == "AB12345"
    assert guess.expiry == "2025-12-01"
    assert guess.price == pytest.approx(45.00)
    assert guess.quantity == 1


def test_single_product_name_from_price_line():
    guess = parse_single_product("Crocin Advance 15.00")
    assert guess.name == "Crocin Advance"
    assert guess.price == pytest.approx(15.00)


def test_single_product_first_date_when_no_keyword():
    assert parse_single_product("Dolo 650\n10/11/2026").expiry == "2026-11-10"


def test_single_product_empty():
    guess = parse_single_product("")
    assert guess.name == ""
    assert guess.price == 0.0
    assert guess.batch is None


# ─── Properties ───────────────────────────────────────────────────────────────

@pytest.mark.parametrize("text", NOISE)
def test_parsers_never_raise(text):
    for parse in (parse_order_receipt, parse_patient_medicines, parse_single_product):
        parse(text)


@pytest.mark.parametrize("text", NOISE + [ORDER_RECEIPT_TEXT, PRESCRIPTION_TEXT])
def test_emitted_records_are_valid(text):
    records = parse_order_receipt(text).products + parse_patient_medicines(text).medicines
    for record in records:
        assert record.name.strip()
        assert record.quantity >= 1
        assert record.price >= 0


def test_reparsing_formatted_output():
    first = parse_order_receipt(ORDER_RECEIPT_TEXT)
    formatted = "\n".join(f"{p.name} {p.price:.2f} {p.quantity}" for p in first.products)

    again = parse_order_receipt(formatted)
    assert [(p.name, p.price, p.quantity) for p in again.products] == [
        (p.name, pytest.approx(p.price), p.quantity) for p in first.products
    ]


def test_fallback_can_be_disabled():
    extractor = OrderReceiptExtractor({'extraction': {'enable_fallback': False}})
    assert extractor.extract("Paracetamol 500mg 4.50").products == []


# ─── Factory ──────────────────────────────────────────────────────────────────

def test_factory_modes():
    factory = ExtractorFactory()
    assert isinstance(factory.get_extractor("single_product"), ProductLabelExtractor)
    assert isinstance(factory.get_extractor("patient"), PatientMedicineExtractor)
    assert isinstance(factory.get_extractor("order"), OrderReceiptExtractor)
    assert factory.supported_modes == ["single_product", "patient", "order"]


def test_factory_caches_instances():
    factory = ExtractorFactory()
    assert factory.get_extractor("order") is factory.get_extractor("order")


def test_factory_unknown_mode_falls_back():
    factory = ExtractorFactory()
    assert isinstance(factory.get_extractor("barcode"), ProductLabelExtractor)
    assert factory.resolve_mode("barcode") == "single_product"


def test_order_receipt_batch_line_below_row():
    receipt = parse_order_receipt(
        "Item Qty Price\n"
        "Paracetamol 500mg 10 4.50\n"
        "Batch: PC12345 Exp: 12/2026\n"
        "Ibuprofen 200mg 5 3.20\n"
    )
    assert [(p.name, p.batch, p.expiry) for p in receipt.products] == [
        ("Paracetamol 500mg", "PC12345", "2026-12-01"),
        ("Ibuprofen 200mg", None, None),
    ]
