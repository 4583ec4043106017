"""Tests for character width measurement and cursor layout."""

from __future__ import annotations

import pytest

from termsession.config.settings import MetricsConfig
from termsession.text.metrics import TextMetrics


class TestWidths:
    """Test per-character and string widths."""

    def test_ascii_is_narrow(self, metrics: TextMetrics) -> None:
        assert metrics.width_of("a") == 8
        assert metrics.width_of(" ") == 8

    def test_multibyte_is_wide(self, metrics: TextMetrics) -> None:
        assert metrics.width_of("中") == 13
        assert metrics.width_of("é") == 13

    def test_string_width(self, metrics: TextMetrics) -> None:
        assert metrics.string_width("a中") == 21
        assert metrics.string_width("") == 0

    def test_rejects_non_positive_widths(self) -> None:
        with pytest.raises(ValueError):
            TextMetrics(narrow=0, wide=13)
        with pytest.raises(ValueError):
            TextMetrics(narrow=8, wide=-1)

    def test_calibrate_replaces_widths(self, metrics: TextMetrics) -> None:
        metrics.calibrate(7, 14)
        assert metrics.narrow == 7
        assert metrics.wide == 14
        with pytest.raises(ValueError):
            metrics.calibrate(0, 14)

    def test_from_config(self) -> None:
        metrics = TextMetrics.from_config(MetricsConfig(narrow_width=9, wide_width=16, line_height=18))
        assert metrics.narrow == 9
        assert metrics.wide == 16
        assert metrics.line_height == 18


class TestWrap:
    """Test greedy line wrapping."""

    def test_splits_at_line_width(self, metrics: TextMetrics) -> None:
        assert metrics.wrap("abcdef", 24) == ["abc", "def"]

    def test_empty_text_is_one_empty_line(self, metrics: TextMetrics) -> None:
        assert metrics.wrap("", 24) == [""]

    def test_oversized_character_still_progresses(self, metrics: TextMetrics) -> None:
        assert metrics.wrap("中a", 10) == ["中", "a"]

    def test_short_text_is_single_line(self, metrics: TextMetrics) -> None:
        assert metrics.wrap("ls", 100) == ["ls"]


class TestLayout:
    """Test cursor placement within the input line."""

    def test_first_character_starts_at_prompt(self, metrics: TextMetrics) -> None:
        box = metrics.layout("abc", 0, 100)
        assert box.left == 0
        assert box.top == 0
        assert box.width == 8
        assert box.at_end is False

    def test_left_is_sum_of_previous_widths(self, metrics: TextMetrics) -> None:
        box = metrics.layout("abc", 2, 100)
        assert box.index == 2
        assert box.left == 16
        assert box.width == 8

    def test_wide_character_width(self, metrics: TextMetrics) -> None:
        box = metrics.layout("a中b", 1, 100)
        assert box.left == 8
        assert box.width == 13

        after = metrics.layout("a中b", 2, 100)
        assert after.left == 21
        assert after.width == 8

    def test_overflow_moves_to_next_line(self, metrics: TextMetrics) -> None:
        box = metrics.layout("aaaa", 3, 20)
        assert box.top == 20
        assert box.left == 8

    def test_prompt_width_offsets_first_line(self) -> None:
        metrics = TextMetrics(narrow=8, wide=13, prompt_width=30)
        assert metrics.layout("ab", 0, 100).left == 30
        assert metrics.layout("ab", 1, 100).left == 38

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_out_of_range_index_resets(self, metrics: TextMetrics, index: int) -> None:
        box = metrics.layout("abc", index, 100)
        assert box.at_end is True
        assert box.index == 3
        assert box.left == 0
        assert box.top == 0
        assert box.width == 8

    def test_reset_on_empty_text(self, metrics: TextMetrics) -> None:
        box = metrics.reset("")
        assert box.index == 0
        assert box.at_end is True

    @pytest.mark.parametrize(
        ("text", "index", "line_width"),
        [("a中b", 2, 100), ("aaaa", 3, 20), ("中中中中", 3, 30)],
    )
    def test_layout_is_idempotent(
        self, metrics: TextMetrics, text: str, index: int, line_width: float
    ) -> None:
        first = metrics.layout(text, index, line_width)
        second = metrics.layout(text, index, line_width)
        assert first == second
