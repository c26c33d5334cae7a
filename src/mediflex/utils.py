"""
Utility functions for MediFlex: configuration, logging and file checks
"""

import copy
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from loguru import logger


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "mediflex.yaml"


def default_config() -> Dict:
    """Return default configuration"""
    return {
        'ocr': {
            'use_gpu': False,
            'use_angle_cls': True,
            'lang': 'en',
            'det_db_thresh': 0.15,
            'drop_score': 0.25,
            'rec_batch_num': 6,
        },
        'validation': {
            'allowed_extensions': ['.jpg', '.jpeg', '.png', '.webp', '.bmp', '.tiff'],
            'min_image_size': 100,
            'max_image_size': 4096,
        },
        'extraction': {
            'name_min_length': 3,
            'name_max_length': 50,
            'fallback_min_length': 10,
            'enable_fallback': True,
        },
        'storage': {
            'path': 'data/mediflex_store.json',
        },
        'dashboard': {
            'max_recent_activities': 10,
        },
        'logging': {
            'level': 'INFO',
            'file': None,
        },
    }


def _merge(base: Dict, override: Dict) -> Dict:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict:
    """
    Load configuration from a YAML file, layered over the defaults.

    Args:
        config_path: Path to YAML file (default: config/mediflex.yaml)

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not os.path.exists(config_path):
        logger.warning(f"Config file not found: {config_path}, using defaults")
        return default_config()

    with open(config_path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    logger.debug(f"Loaded config from {config_path}")
    return _merge(default_config(), loaded)


def validate_image_file(file_path: str, allowed_extensions: Optional[List[str]] = None) -> Tuple[bool, str]:
    """
    Validate if file exists and has an image extension

    Args:
        file_path: Path to file
        allowed_extensions: List of allowed extensions (default: common image formats)

    Returns:
        (is_valid, message)
    """
    if allowed_extensions is None:
        allowed_extensions = default_config()['validation']['allowed_extensions']

    if not os.path.exists(file_path):
        return False, "File not found"

    ext = os.path.splitext(file_path)[1].lower()
    if ext not in allowed_extensions:
        return False, f"Invalid extension: {ext}. Allowed: {allowed_extensions}"

    if os.path.getsize(file_path) == 0:
        return False, "File is empty"

    return True, "Valid image file"


def ensure_directory(dir_path: str) -> str:
    """
    Ensure directory exists, create if it doesn't

    Returns:
        Absolute path to directory
    """
    path = Path(dir_path)
    path.mkdir(parents=True, exist_ok=True)
    return str(path.absolute())


def format_processing_time(milliseconds: int) -> str:
    """
    Format processing time in human-readable format (e.g. "1.23s", "456ms")
    """
    if milliseconds < 1000:
        return f"{milliseconds}ms"
    seconds = milliseconds / 1000
    return f"{seconds:.2f}s"


def setup_logging(log_file: Optional[str] = None, level: str = "INFO"):
    """
    Setup logging configuration

    Args:
        log_file: Path to log file (None disables the file sink)
        level: Log level (DEBUG, INFO, WARNING, ERROR)
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level=level
    )

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            ensure_directory(log_dir)
        logger.add(
            log_file,
            rotation="10 MB",
            retention="30 days",
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
        )

    logger.info("Logging initialized")
