"""Append-only session log with an overflow warning guard."""

from termsession.output.buffer import LogBuffer, coerce_entry

__all__ = ["LogBuffer", "coerce_entry"]
