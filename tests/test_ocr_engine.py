"""
Tests for OCR Engine
"""

import pytest

from mediflex.ocr_engine import OCREngine
from mediflex.utils import default_config


class FakePaddle:
    """Stands in for PaddleOCR; returns canned rows"""

    def __init__(self, rows):
        self.rows = rows
        self.calls = []

    def ocr(self, image_path, cls=True):
        self.calls.append((image_path, cls))
        return [self.rows]


def _row(text, confidence):
    return [[[0, 0], [100, 0], [100, 20], [0, 20]], (text, confidence)]


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "label.jpg"
    path.write_bytes(b"not really a jpeg")
    return str(path)


@pytest.fixture
def engine():
    backend = FakePaddle([
        _row("Paracetamol 500mg", 0.98),
        _row("Batch No: AB12345", 0.9),
        _row("MRP: 45.00", 0.82),
    ])
    return OCREngine(default_config(), ocr=backend)


def test_engine_defaults_config():
    engine = OCREngine()
    assert engine.config['ocr']['lang'] == 'en'
    assert engine.ocr is None


def test_extract_text(engine, sample_file):
    result = engine.extract_text(sample_file)

    assert result['status'] == 'success'
    assert result['text'] == "Paracetamol 500mg\nBatch No: AB12345\nMRP: 45.00"
    assert result['lines_detected'] == 3
    assert result['average_confidence'] == pytest.approx(0.9, abs=1e-3)
    assert result['lines'][0]['bbox'][1] == [100, 0]
    assert engine.ocr.calls == [(sample_file, True)]


def test_extract_text_nothing_found(sample_file):
    engine = OCREngine(default_config(), ocr=FakePaddle([]))
    result = engine.extract_text(sample_file)

    assert result['status'] == 'no_text_found'
    assert result['text'] == ''
    assert result['lines_detected'] == 0


def test_get_text(engine, sample_file):
    assert engine.get_text(sample_file).splitlines()[0] == "Paracetamol 500mg"


def test_invalid_image_path(engine):
    """Test handling of invalid image path"""
    with pytest.raises(FileNotFoundError):
        engine.extract_text("this_does_not_exist.jpg")


def test_backend_errors_propagate(sample_file):
    class Broken:
        def ocr(self, image_path, cls=True):
            raise RuntimeError("model crashed")

    with pytest.raises(RuntimeError):
        OCREngine(default_config(), ocr=Broken()).extract_text(sample_file)


def test_validate_image_rejects_missing_and_bad_extension(engine, tmp_path):
    is_valid, msg = engine.validate_image("nonexistent.jpg")
    assert is_valid is False
    assert "not found" in msg.lower()

    text_file = tmp_path / "notes.txt"
    text_file.write_text("hello", encoding="utf-8")
    is_valid, msg = engine.validate_image(str(text_file))
    assert is_valid is False
    assert "extension" in msg.lower()


def test_validate_image_sizes(engine, tmp_path):
    cv2 = pytest.importorskip("cv2")
    np = pytest.importorskip("numpy")

    good = tmp_path / "good.png"
    cv2.imwrite(str(good), np.full((200, 400, 3), 255, dtype=np.uint8))
    assert engine.validate_image(str(good)) == (True, "Valid image")

    tiny = tmp_path / "tiny.png"
    cv2.imwrite(str(tiny), np.full((20, 20, 3), 255, dtype=np.uint8))
    is_valid, msg = engine.validate_image(str(tiny))
    assert is_valid is False
    assert "too small" in msg

    garbage = tmp_path / "garbage.png"
    garbage.write_bytes(b"\x00\x01\x02")
    assert engine.validate_image(str(garbage)) == (False, "Unable to read image file")
