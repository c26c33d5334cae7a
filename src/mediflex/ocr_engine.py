"""
OCR Engine for pharmacy documents
Uses PaddleOCR for text detection and recognition

The PaddleOCR backend is created on first use, so the extraction code and the
services can be imported and tested without the OCR stack installed.
A pre-built backend (anything with an ``ocr(path, cls=True)`` method) can be
injected instead.
"""

import os
import time
from typing import Dict, List, Optional, Tuple

import numpy as np
from loguru import logger

from mediflex.utils import default_config, validate_image_file

# Windows OneDNN compatibility
os.environ.setdefault('FLAGS_use_mkldnn', 'False')
os.environ.setdefault('FLAGS_enable_new_ir', 'False')


class OCREngine:
    """
    Document OCR engine powered by PaddleOCR

    Usage
    -----
    engine = OCREngine(load_config())
    result = engine.extract_text("label.jpg")
    text   = result["text"]
    """

    def __init__(self, config: Optional[Dict] = None, ocr=None):
        self.config = config or default_config()
        self.ocr = ocr

    def _initialize_ocr(self):
        """Initialize the PaddleOCR model from the `ocr` config section"""
        from paddleocr import PaddleOCR

        ocr_config = self.config.get('ocr', {})
        init_params = {
            'use_angle_cls': ocr_config.get('use_angle_cls', True),
            'lang':          ocr_config.get('lang', 'en'),
            'use_gpu':       ocr_config.get('use_gpu', False),
            'det_db_thresh': ocr_config.get('det_db_thresh', 0.15),
            'rec_batch_num': ocr_config.get('rec_batch_num', 6),
            'drop_score':    ocr_config.get('drop_score', 0.25),
            'use_space_char': True,
            'show_log':      False,
        }

        logger.info(
            f"Initializing PaddleOCR (lang={init_params['lang']}, gpu={init_params['use_gpu']}, "
            f"det_db_thresh={init_params['det_db_thresh']}, drop_score={init_params['drop_score']})"
        )
        try:
            self.ocr = PaddleOCR(**init_params)
        except Exception as e:
            logger.error(f"Failed to initialize PaddleOCR: {e}")
            raise
        logger.success("PaddleOCR model loaded")

    def extract_text(self, image_path: str) -> Dict:
        """
        Extract text from a document image

        Returns:
            Dictionary with status, text, lines (text / confidence / bbox),
            lines_detected, average_confidence and processing_time_ms
        """
        if not os.path.exists(image_path):
            raise FileNotFoundError(f"Image not found: {image_path}")

        if self.ocr is None:
            self._initialize_ocr()

        logger.info(f"Processing image: {image_path}")
        start_time = time.time()

        try:
            result = self.ocr.ocr(image_path, cls=True)
        except Exception as e:
            logger.error(f"OCR extraction failed: {e}")
            raise

        if not result or not result[0]:
            logger.warning(f"No text detected in {image_path}")
            return {
                "status": "no_text_found",
                "text": "",
                "lines": [],
                "lines_detected": 0,
                "average_confidence": 0.0,
                "processing_time_ms": int((time.time() - start_time) * 1000),
            }

        lines = self._parse_ocr_result(result[0])
        avg_confidence = float(np.mean([line["confidence"] for line in lines])) if lines else 0.0
        processing_time = int((time.time() - start_time) * 1000)

        logger.info(f"Extracted {len(lines)} lines in {processing_time}ms  avg_conf={avg_confidence:.2f}")

        return {
            "status": "success",
            "text": "\n".join(line["text"] for line in lines),
            "lines": lines,
            "lines_detected": len(lines),
            "average_confidence": round(avg_confidence, 3),
            "processing_time_ms": processing_time,
        }

    def _parse_ocr_result(self, result: List) -> List[Dict]:
        """PaddleOCR rows are [bbox, (text, confidence)]"""
        return [
            {
                'text': line[1][0],
                'confidence': round(float(line[1][1]), 3),
                'bbox': line[0],
            }
            for line in result
        ]

    def get_text(self, image_path: str) -> str:
        return self.extract_text(image_path)["text"]

    def validate_image(self, image_path: str) -> Tuple[bool, str]:
        """
        Validate if image is suitable for OCR

        Returns:
            (is_valid, message)
        """
        validation = self.config.get('validation', {})
        ok, message = validate_image_file(image_path, validation.get('allowed_extensions'))
        if not ok:
            return ok, message

        import cv2

        img = cv2.imread(image_path)
        if img is None:
            return False, "Unable to read image file"

        height, width = img.shape[:2]
        max_size = validation.get('max_image_size', 4096)
        min_size = validation.get('min_image_size', 100)

        if width > max_size or height > max_size:
            return False, f"Image too large (max: {max_size}px)"
        if width < min_size or height < min_size:
            return False, f"Image too small (min: {min_size}px)"

        return True, "Valid image"
