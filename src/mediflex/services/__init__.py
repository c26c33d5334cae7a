"""
Services package - inventory, distributors, regular buyers and the dashboard,
all backed by an injected StoragePort.
"""

from mediflex.services.buyers import BuyerService, calculate_total_spend, format_price
from mediflex.services.dashboard import DashboardService
from mediflex.services.distributors import DistributorService
from mediflex.services.inventory import InventoryService
from mediflex.services.storage import JsonFileStorage, MemoryStorage, StoragePort

__all__ = [
    "BuyerService",
    "DashboardService",
    "DistributorService",
    "InventoryService",
    "JsonFileStorage",
    "MemoryStorage",
    "StoragePort",
    "calculate_total_spend",
    "format_price",
]
