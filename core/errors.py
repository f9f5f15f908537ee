from typing import Optional

class CalculationError(Exception):
    """Base class for errors raised by the sizing calculators."""

class ValidationError(CalculationError, ValueError):
    """A required input is missing, not numeric, or outside its allowed range."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
