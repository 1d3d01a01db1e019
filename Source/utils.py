#!/usr/bin/env python3
"""
Utility functions for SplitSlip
"""

import re
import sys
import logging
import mimetypes
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from pathlib import Path
from typing import Optional, Union

from config import LOG_LEVEL, MAX_IMAGE_SIZE_BYTES, CURRENCY_SYMBOL
from constants import DECIMAL_QUANTIZE

LOGGER_NAMESPACE = "splitslip"
LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def configure_logging(level: Optional[int] = None) -> None:
    """Attach a stderr handler to the splitslip logger namespace (once)"""
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = _LEVELS.get(LOG_LEVEL, logging.WARNING)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT))

    root_logger = logging.getLogger(LOGGER_NAMESPACE)
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    root_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the splitslip namespace"""
    configure_logging()
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


def set_log_level(level: int) -> None:
    """Change the log level at runtime"""
    logger = logging.getLogger(LOGGER_NAMESPACE)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(LOG_FORMAT_DEBUG if level == logging.DEBUG else LOG_FORMAT))


def to_money(value: Union[str, int, float, Decimal]) -> Decimal:
    """Quantize a value to currency precision (half-up)"""
    return Decimal(str(value)).quantize(DECIMAL_QUANTIZE, rounding=ROUND_HALF_UP)


def try_parse_decimal(value: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """Safely parse a finite decimal amount, returns None when malformed"""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().replace(CURRENCY_SYMBOL, '').replace(',', '.').strip()
        if not value:
            return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return amount


def format_currency(amount: Decimal, symbol: str = CURRENCY_SYMBOL) -> str:
    """Format an amount with the currency symbol, minus sign first"""
    amount = to_money(amount)
    if amount < 0:
        return f"-{symbol}{-amount:.2f}"
    return f"{symbol}{amount:.2f}"


def validate_image_path(image_path: str) -> bool:
    """Image path validation with basic security checks"""
    if not isinstance(image_path, str):
        print("Image path must be a string")
        return False

    path = Path(image_path)

    if '..' in path.parts:
        print(f"Security risk: Invalid path pattern: {image_path}")
        return False

    if not path.is_file():
        print(f"File not found: {image_path}")
        return False

    if path.stat().st_size > MAX_IMAGE_SIZE_BYTES:
        print(f"File too large: {path.stat().st_size} bytes (max: {MAX_IMAGE_SIZE_BYTES})")
        return False

    allowed_extensions = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.gif', '.webp'}
    if path.suffix.lower() not in allowed_extensions:
        print(f"Unsupported file extension: {path.suffix}")
        return False

    mime_type, _ = mimetypes.guess_type(str(path))
    if mime_type and not mime_type.startswith('image/'):
        print(f"Invalid MIME type: {mime_type}")
        return False

    return True


def validate_menu_choice(choice: str, valid_choices: list[str]) -> Optional[str]:
    """Validate a menu choice against allowed options"""
    if not isinstance(choice, str):
        return None
    choice = choice.strip()
    return choice if choice in set(valid_choices) else None


def clean_text_for_display(text: str, max_length: int = 100) -> str:
    """Clean text for safe display in the terminal"""
    if not isinstance(text, str):
        return ""

    # Remove control characters
    text = re.sub(r'[\x00-\x1f\x7f-\x9f]', '', text)
    text = ' '.join(text.split())

    if len(text) > max_length:
        text = text[:max_length-3] + "..."

    return text
