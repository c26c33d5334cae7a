"""
Tests for BuyerService and the price helpers
"""

import pytest

from mediflex.models import BuyerPurchase
from mediflex.services.buyers import calculate_total_spend, format_price


def test_add_buyer_records_activity(buyers, dashboard):
    buyer = buyers.add_buyer("Anita Rao", "98450 12345", notes="Diabetic, monthly refill")
    assert buyer.id == 1
    assert buyer.purchases == []
    assert dashboard.get_recent_activities()[0].title == "Added new buyer: Anita Rao"


def test_add_buyer_requires_name_and_contact(buyers):
    with pytest.raises(ValueError):
        buyers.add_buyer("", "98450 12345")
    with pytest.raises(ValueError):
        buyers.add_buyer("Anita Rao", "   ")


def test_update_and_delete(buyers):
    buyer = buyers.add_buyer("Anita Rao", "98450 12345")
    assert buyers.update_buyer(buyer.id, notes="Prefers generics").notes == "Prefers generics"
    assert buyers.update_buyer(99, notes="x") is None
    assert buyers.delete_buyer(buyer.id) is True
    assert buyers.delete_buyer(buyer.id) is False
    assert buyers.get_buyers() == []


def test_add_purchase(buyers):
    buyer = buyers.add_buyer("Anita Rao", "98450 12345")
    buyers.add_purchase(buyer.id, {"medicine": "Metformin", "date": "2024-03-05", "quantity": 2, "price": 62.0})
    updated = buyers.add_purchase(buyer.id, {"medicine": "Insulin", "date": "2024-03-06", "price": 450.0})

    assert [p.id for p in updated.purchases] == [1, 2]
    assert updated.purchases[1].quantity == 1
    assert buyers.add_purchase(42, {"medicine": "X", "date": "2024-03-06"}) is None


def test_search_buyers(buyers):
    buyers.add_buyer("Anita Rao", "98450 12345")
    buyers.add_buyer("Vikram Shah", "vikram@example.com")
    assert [b.name for b in buyers.search_buyers("rao")] == ["Anita Rao"]
    assert [b.name for b in buyers.search_buyers("EXAMPLE")] == ["Vikram Shah"]
    assert len(buyers.search_buyers("")) == 2


def test_calculate_total_spend():
    purchases = [
        BuyerPurchase(id=1, medicine="A", date="2024-03-05", quantity=2, price=62.0),
        BuyerPurchase(id=2, medicine="B", date="2024-03-06", quantity=1, price=450.5),
    ]
    assert calculate_total_spend(purchases) == pytest.approx(574.5)
    assert calculate_total_spend([]) == 0


@pytest.mark.parametrize("amount, expected", [
    (0, "₹0"),
    (574.5, "₹575"),
    (574.49, "₹574"),
    (2.5, "₹3"),
])
def test_format_price_rounds_half_up(amount, expected):
    assert format_price(amount) == expected
