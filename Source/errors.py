"""
Error types for SplitSlip
"""


class SplitSlipError(Exception):
    """Base class for errors surfaced to the user"""


class RecognitionFailure(SplitSlipError, RuntimeError):
    """Raised when text recognition of a receipt image fails"""


class ValidationError(SplitSlipError, ValueError):
    """Raised when a write operation receives malformed input"""


class NotFoundError(SplitSlipError, KeyError):
    """Raised when a person, receipt or item id is unknown"""

    def __str__(self):
        return str(self.args[0]) if self.args else ""
