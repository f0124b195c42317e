"""Route modules for the public API."""

from . import uploads

__all__ = ["uploads"]
