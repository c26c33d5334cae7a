"""
Command line entry point for MediFlex
"""

import argparse
import json
import sys
from typing import List, Optional

from loguru import logger

from mediflex.extractor import ExtractorFactory
from mediflex.models import OrderReceiptData, PatientRecipient
from mediflex.scan_processor import ScanProcessor
from mediflex.services import DashboardService, InventoryService, JsonFileStorage
from mediflex.utils import load_config, setup_logging

_MODES = ExtractorFactory().supported_modes


def _dump(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _read_text(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    with open(source, 'r', encoding='utf-8') as f:
        return f.read()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mediflex",
        description="MediFlex - pharmacy inventory with OCR capture",
    )
    parser.add_argument("--config", "-c", type=str, default=None, help="YAML config file")
    parser.add_argument("--store", type=str, default=None, help="JSON data store (overrides config)")
    parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING, ERROR")

    sub = parser.add_subparsers(dest="command")

    # parse
    parse_parser = sub.add_parser("parse", help="Parse OCR text from a file or stdin")
    parse_parser.add_argument("source", nargs="?", default="-", help="Text file, or - for stdin")
    parse_parser.add_argument("--mode", choices=_MODES, default="single_product")

    # scan
    scan_parser = sub.add_parser("scan", help="Run OCR on an image and parse it")
    scan_parser.add_argument("image", type=str)
    scan_parser.add_argument("--mode", choices=_MODES, default="single_product")
    scan_parser.add_argument("--save", action="store_true", help="Save the result to inventory")

    # inventory
    inventory_parser = sub.add_parser("inventory", help="List or search inventory")
    inventory_parser.add_argument("--search", type=str, default=None)

    # stats
    sub.add_parser("stats", help="Dashboard statistics")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    config = load_config(args.config)
    setup_logging(
        log_file=config['logging'].get('file'),
        level=args.log_level or config['logging'].get('level', 'INFO'),
    )
    store_path = args.store or config['storage']['path']

    try:
        if args.command == "parse":
            extractor = ExtractorFactory(config).get_extractor(args.mode)
            result = extractor.extract(_read_text(args.source))
            _dump(result.model_dump(mode='json'))

        elif args.command == "scan":
            processor = ScanProcessor(args.config, storage=JsonFileStorage(store_path))
            outcome = processor.process_image(args.image, args.mode)
            if outcome['status'] != 'success':
                _dump(outcome)
                return 1

            result = outcome['result']
            if args.save:
                if isinstance(result, PatientRecipient):
                    processor.save_patient_medicines(result)
                elif isinstance(result, OrderReceiptData):
                    processor.process_order_receipt(result)
                else:
                    processor.save_single_product(result)
            outcome['result'] = result.model_dump(mode='json')
            _dump(outcome)

        elif args.command == "inventory":
            inventory = InventoryService(JsonFileStorage(store_path))
            items = inventory.search_inventory(args.search) if args.search else inventory.get_inventory()
            _dump([item.model_dump(mode='json') for item in items])

        elif args.command == "stats":
            dashboard = DashboardService(
                JsonFileStorage(store_path),
                max_activities=config['dashboard']['max_recent_activities'],
            )
            _dump({
                "stats": [s.model_dump(mode='json') for s in dashboard.get_dashboard_stats()],
                "recent_activities": [a.model_dump(mode='json') for a in dashboard.get_recent_activities()],
            })

    except (OSError, ValueError) as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
