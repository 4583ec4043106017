"""Character width measurement and cursor layout for termsession."""

from termsession.text.metrics import TextMetrics

__all__ = ["TextMetrics"]
