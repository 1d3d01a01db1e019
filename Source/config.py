"""
Centralized configuration for SplitSlip with environment
"""

import os
from decimal import Decimal

# OCR settings
OCR_PSM = int(os.getenv("SPLITSLIP_OCR_PSM", "6"))
OCR_LANGUAGES = os.getenv("SPLITSLIP_OCR_LANGUAGES", "eng")

# Runtime settings
DEFAULT_MAX_WORKERS = int(os.getenv("SPLITSLIP_MAX_WORKERS", "4"))
CURRENCY_SYMBOL = os.getenv("SPLITSLIP_CURRENCY_SYMBOL", "$")
LOG_LEVEL = os.getenv("SPLITSLIP_LOG_LEVEL", "WARNING").upper()

# Thresholds
ALLOCATION_TOLERANCE = Decimal(os.getenv("SPLITSLIP_ALLOCATION_TOLERANCE", "0.01"))
TOTAL_MISMATCH_TOLERANCE = Decimal(os.getenv("SPLITSLIP_TOTAL_MISMATCH_TOLERANCE", "1.00"))
SEAM_SIMILARITY_THRESHOLD = float(os.getenv("SPLITSLIP_SEAM_SIMILARITY", "0.95"))
SEAM_WINDOW_LINES = int(os.getenv("SPLITSLIP_SEAM_WINDOW", "4"))
IMAGE_REGION_OVERLAP_PX = int(os.getenv("SPLITSLIP_IMAGE_OVERLAP", "50"))
MAX_IMAGE_SIZE_BYTES = int(os.getenv("SPLITSLIP_MAX_IMAGE_SIZE_BYTES", str(50 * 1024 * 1024)))

# Workers bounds
WORKERS_MIN = int(os.getenv("SPLITSLIP_WORKERS_MIN", "1"))
WORKERS_MAX = int(os.getenv("SPLITSLIP_WORKERS_MAX", "16"))
