"""
MediFlex - pharmacy inventory with OCR capture
"""

__version__ = "1.0.0"
