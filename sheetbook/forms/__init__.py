"""Form sessions package."""

from sheetbook.forms import messages
from sheetbook.forms.session import FormError, SheetFormSession
from sheetbook.forms.sheet_types import (
    SESSION_TYPES,
    ArtisanFormSession,
    SalaryFormSession,
    TraderFormSession,
)

__all__ = [
    "ArtisanFormSession",
    "FormError",
    "SESSION_TYPES",
    "SalaryFormSession",
    "SheetFormSession",
    "TraderFormSession",
    "messages",
]
