"""Display-width math for the command input line.

Characters are either narrow (single UTF-8 byte) or wide (anything
longer). Both unit widths are measured once by the host from its
rendering surface and injected here.
"""

from __future__ import annotations

import logging

from termsession.config.settings import MetricsConfig
from termsession.domain.models import CursorBox

logger = logging.getLogger(__name__)


class TextMetrics:
    """Measures characters and positions the input cursor.

    Example usage::

        metrics = TextMetrics(narrow=8, wide=13)
        box = metrics.layout("ls -la", 3, line_width=400)
    """

    def __init__(
        self,
        narrow: float = 8.0,
        wide: float = 13.0,
        line_height: float = 20.0,
        prompt_width: float = 0.0,
    ) -> None:
        if narrow <= 0 or wide <= 0:
            raise ValueError("Character unit widths must be positive")
        self._narrow = narrow
        self._wide = wide
        self._line_height = line_height
        self._prompt_width = prompt_width

    @classmethod
    def from_config(cls, config: MetricsConfig) -> TextMetrics:
        return cls(
            narrow=config.narrow_width,
            wide=config.wide_width,
            line_height=config.line_height,
            prompt_width=config.prompt_width,
        )

    @property
    def narrow(self) -> float:
        return self._narrow

    @property
    def wide(self) -> float:
        return self._wide

    @property
    def line_height(self) -> float:
        return self._line_height

    def calibrate(self, narrow: float, wide: float, prompt_width: float | None = None) -> None:
        """Replace the unit widths with values measured by the host."""
        if narrow <= 0 or wide <= 0:
            raise ValueError("Character unit widths must be positive")
        self._narrow = narrow
        self._wide = wide
        if prompt_width is not None:
            self._prompt_width = prompt_width
        logger.debug("Calibrated char widths: narrow=%s wide=%s", narrow, wide)

    def width_of(self, char: str) -> float:
        """Display width of a single character."""
        return self._wide if len(char.encode("utf-8")) > 1 else self._narrow

    def string_width(self, text: str) -> float:
        return sum(self.width_of(ch) for ch in text)

    def wrap(self, text: str, line_width: float) -> list[str]:
        """Split text into lines no wider than line_width.

        A line always takes at least one character, so a character wider
        than the line still makes progress.
        """
        lines: list[str] = []
        current = ""
        used = 0.0
        for ch in text:
            w = self.width_of(ch)
            if current and used + w > line_width:
                lines.append(current)
                current, used = "", 0.0
            current += ch
            used += w
        if current or not lines:
            lines.append(current)
        return lines

    def reset(self, text: str) -> CursorBox:
        """Cursor parked after the last character of text."""
        return CursorBox(index=len(text), left=0.0, top=0.0, width=self._narrow, at_end=True)

    def layout(self, text: str, index: int, line_width: float) -> CursorBox:
        """Pixel box of the cursor covering text[index].

        Walks characters up to and including index. The left edge of each
        character is the running sum of the previous widths, starting
        after the prompt. Overflowing line_width moves to the next line.
        """
        if index < 0 or index >= len(text):
            return self.reset(text)

        left = 0.0
        top = 0.0
        char_width = self._narrow
        previous_width = self._prompt_width
        for i in range(index + 1):
            char_width = self.width_of(text[i])
            left += previous_width
            previous_width = char_width
            if left > line_width:
                top += self._line_height
                left = char_width

        return CursorBox(index=index, left=left, top=top, width=char_width)
