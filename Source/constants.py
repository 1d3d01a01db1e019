from decimal import Decimal

# Money
DECIMAL_QUANTIZE = Decimal("0.01")
ZERO = Decimal("0.00")

# <weight> kg NET @ $<unit>/kg
QUANTITY_PREFIX = r'(\d+(?:\.\d+)?)\s*kg\s+NET\s*@\s*\$?\s*(\d+(?:\.\d+)?)\s*/\s*kg'

PATTERNS = {
        'quantity_with_price': QUANTITY_PREFIX + r'\s+(\d+\.\d{2})\s*$',
        'quantity_only': QUANTITY_PREFIX,
        'quantity_trailing_price': r'\$?\s*(-?\d+\.\d{2})(?!\d)',
        'bare_price': r'^\$?\s*(-?\d+\.\d{2})$',
        'single_line_item': r'^(.+?)\s*\$?(-?\d+\.\d{2})\s*$',
        'numeric_fragment': r'^[\$\-]?\s*\d[\d\s\.,%]*$',

        'total': r'total\s*\$?\s*(\d+\.\d{2})',
        'date': r'(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})',

        'discount_name': r'(?:WOW|DISCOUNT|OFFER)\s*\d+\s*(?:%|OFFER|OFF)',
    }

# Item names dropped after parsing (OCR misreads of column headers)
HEADER_DENYLIST = [
    'Description $',
]
