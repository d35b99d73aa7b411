"""Tests for pictogram classification."""

import pytest

from labrisk.pictograms import PICTOGRAMS, classify_pictogram, pictogram_label, pictogram_svg


class TestClassifyPictogram:

    @pytest.mark.parametrize("raw", ["GHS02", "Flame", "ghs02", "https://pubchem.ncbi.nlm.nih.gov/images/ghs/GHS02.svg"])
    def test_flame_variants(self, raw) -> None:
        assert classify_pictogram(raw) == "flame"

    def test_flame_over_circle_is_oxidizer(self) -> None:
        assert classify_pictogram("Flame over circle") == "oxidizer"

    def test_descriptive_phrase_wins_over_code(self) -> None:
        assert classify_pictogram("Skull and crossbones (GHS02)") == "skull"

    @pytest.mark.parametrize("raw,expected", [
        ("Exploding bomb", "exploding_bomb"),
        ("Gas cylinder", "gas_cylinder"),
        ("Corrosion", "corrosion"),
        ("Environment", "environment"),
        ("Exclamation mark", "exclamation"),
        ("Health hazard", "health_hazard"),
        ("GHS06", "skull"),
        ("GHS09", "environment"),
    ])
    def test_canonical_names(self, raw, expected) -> None:
        assert classify_pictogram(raw) == expected
        assert expected in PICTOGRAMS

    @pytest.mark.parametrize("raw", ["", "   ", None, 42, "Danger", "Irritant"])
    def test_no_match(self, raw) -> None:
        assert classify_pictogram(raw) is None


def test_svg_badge_carries_label() -> None:
    svg = pictogram_svg("skull")

    assert svg.startswith("<svg")
    assert pictogram_label("skull") in svg
    assert "Skull and crossbones" in svg
