"""Tests for annotation codes, mode parsing and marker patterns."""

from __future__ import annotations

import pytest

from annotext.engine.codes import (
    ANNOTATION_MARKER_PATTERN,
    AnnotationCode,
    Density,
    RenderMode,
)


class TestAnnotationCode:
    """Tests for the closed code set."""

    def test_ten_codes(self) -> None:
        assert [c.value for c in AnnotationCode] == [
            "Y", "B", "O", "G", "R", "P", "L", "GR", "H", "BR",
        ]  # fmt: skip

    def test_markers(self) -> None:
        assert AnnotationCode.GR.open_marker == "[GR]"
        assert AnnotationCode.GR.close_marker == "[/GR]"

    def test_labels(self) -> None:
        assert AnnotationCode.R.label == "warning"
        assert AnnotationCode.P.label == "example"


class TestRenderModeParse:
    """Tests for RenderMode.parse."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("none", RenderMode.NONE),
            ("underline", RenderMode.UNDERLINE),
            ("HIGHLIGHTS", RenderMode.HIGHLIGHTS),
            ("both", RenderMode.BOTH),
            ("highlights-underline", RenderMode.BOTH),
            ("sparkles", RenderMode.HIGHLIGHTS),
            (None, RenderMode.HIGHLIGHTS),
            (RenderMode.UNDERLINE, RenderMode.UNDERLINE),
        ],
    )
    def test_parse(self, value: str | RenderMode | None, expected: RenderMode) -> None:
        assert RenderMode.parse(value) == expected


class TestDensityParse:
    """Tests for Density.parse."""

    def test_explicit(self) -> None:
        assert Density.parse("Explicit") == Density.EXPLICIT

    def test_anything_else_is_auto(self) -> None:
        assert Density.parse("lots") == Density.AUTO
        assert Density.parse(None) == Density.AUTO


class TestMarkerPattern:
    """Tests for the closed-set marker pattern."""

    def test_two_letter_codes_match_whole(self) -> None:
        assert ANNOTATION_MARKER_PATTERN.findall("[GR][/BR][B]") == [
            "[GR]",
            "[/BR]",
            "[B]",
        ]

    def test_lowercase_not_matched(self) -> None:
        assert ANNOTATION_MARKER_PATTERN.search("[y]x[/y]") is None
