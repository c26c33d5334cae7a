"""
Tests for configuration, logging and file helpers
"""

import pytest
from loguru import logger

from mediflex.utils import (
    default_config,
    format_processing_time,
    load_config,
    setup_logging,
    validate_image_file,
)


def test_missing_config_uses_defaults(tmp_path):
    assert load_config(str(tmp_path / "absent.yaml")) == default_config()


def test_config_overrides_merge_over_defaults(tmp_path):
    path = tmp_path / "mediflex.yaml"
    path.write_text(
        "extraction:\n"
        "  enable_fallback: false\n"
        "storage:\n"
        "  path: /tmp/other.json\n",
        encoding="utf-8",
    )
    config = load_config(str(path))

    assert config['extraction']['enable_fallback'] is False
    assert config['extraction']['name_max_length'] == 50
    assert config['storage']['path'] == "/tmp/other.json"
    assert config['ocr']['lang'] == 'en'


def test_empty_config_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(str(path)) == default_config()


def test_config_must_be_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_shipped_config_loads():
    config = load_config()
    assert config['dashboard']['max_recent_activities'] == 10


def test_validate_image_file(tmp_path):
    image = tmp_path / "scan.PNG"
    image.write_bytes(b"\x89PNG")
    empty = tmp_path / "empty.jpg"
    empty.write_bytes(b"")

    assert validate_image_file(str(image)) == (True, "Valid image file")
    assert validate_image_file(str(empty)) == (False, "File is empty")
    assert validate_image_file(str(tmp_path / "nope.jpg"))[0] is False
    assert validate_image_file(str(image), allowed_extensions=['.jpg'])[0] is False


@pytest.mark.parametrize("ms, expected", [(0, "0ms"), (456, "456ms"), (1234, "1.23s")])
def test_format_processing_time(ms, expected):
    assert format_processing_time(ms) == expected


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "mediflex.log"
    try:
        setup_logging(str(log_file), level="DEBUG")
        logger.debug("[Test] hello")
        logger.complete()
    finally:
        logger.remove()

    assert "[Test] hello" in log_file.read_text(encoding="utf-8")
