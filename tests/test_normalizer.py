"""Tests for the PUG View record readers."""

from labrisk.normalizer import (
    BOILING_POINT_KEYWORDS,
    FLASH_POINT_KEYWORDS,
    MELTING_POINT_KEYWORDS,
    collect_strings_and_urls,
    extract_value,
    find_first_value,
    find_section,
    parse_ghs_classification,
)


class TestFindFirstValue:

    def test_nested_heading_with_plain_string(self) -> None:
        record = {"Record": {"Section": [{
            "TOCHeading": "Properties",
            "Section": [{"TOCHeading": "Boiling Point", "Information": [{"Value": {"String": "78 °C"}}]}],
        }]}}

        assert find_first_value(record, ["boiling point"]) == "78 °C"

    def test_missing_heading_is_absent(self) -> None:
        record = {"Record": {"Section": [
            {"TOCHeading": "Boiling Point", "Information": [{"Value": {"String": "78 °C"}}]},
        ]}}

        assert find_first_value(record, ["vapor pressure"]) is None

    def test_heading_field_fallback(self) -> None:
        record = {"Section": [{"Heading": "Normal Boiling Point", "Information": [{"Value": {"String": "100 °C"}}]}]}

        assert find_first_value(record, BOILING_POINT_KEYWORDS) == "100 °C"

    def test_skips_blank_entries_and_prefers_markup(self, ethanol_record) -> None:
        assert find_first_value(ethanol_record, BOILING_POINT_KEYWORDS) == "173.1 °F at 760 mmHg"

    def test_number_with_unit(self, ethanol_record) -> None:
        assert find_first_value(ethanol_record, MELTING_POINT_KEYWORDS) == "-114.1 °C"

    def test_plain_string_value(self, ethanol_record) -> None:
        assert find_first_value(ethanol_record, FLASH_POINT_KEYWORDS) == "55 °F (closed cup)"

    def test_empty_match_keeps_searching(self) -> None:
        record = {"Record": {"Section": [
            {"TOCHeading": "Boiling Point", "Information": [{"Value": {"String": ""}}]},
            {"TOCHeading": "Boiling Point (other)", "Information": [{"Value": {"Number": 80}}]},
        ]}}

        assert find_first_value(record, ["boiling point"]) == "80"

    def test_section_under_unknown_wrapper_key(self) -> None:
        record = {"data": {"Section": [
            {"TOCHeading": "Boiling Point", "Information": [{"Value": {"String": "78 °C"}}]},
        ]}}

        assert find_first_value(record, ["boiling point"]) == "78 °C"

    def test_declared_sections_are_searched_before_other_keys(self) -> None:
        record = {
            "Extra": [{"TOCHeading": "Boiling Point", "Information": [{"Value": {"String": "from wrapper"}}]}],
            "Record": {"Section": [
                {"TOCHeading": "Boiling Point", "Information": [{"Value": {"String": "from record"}}]},
            ]},
        }

        assert find_first_value(record, ["boiling point"]) == "from record"

    def test_information_values_are_not_sections(self) -> None:
        record = {"Record": {"Section": [{
            "TOCHeading": "Notes",
            "Information": [{"Value": {"Heading": "Boiling Point", "String": "not a section"}}],
        }]}}

        assert find_first_value(record, ["boiling point"]) is None

    def test_malformed_input_never_raises(self) -> None:
        assert find_first_value(None, ["boiling point"]) is None
        assert find_first_value("text", ["boiling point"]) is None
        assert find_first_value({"Record": {"Section": ["x", 3, {"TOCHeading": 5}]}}, ["boiling"]) is None
        assert find_first_value({"Record": {"Section": [
            {"TOCHeading": "Boiling Point", "Information": "oops"},
        ]}}, ["boiling"]) is None


class TestExtractValue:

    def test_priority_order(self) -> None:
        value = {"StringWithMarkup": [{"String": "from markup"}], "String": "plain", "Number": [1]}
        assert extract_value(value) == "from markup"
        assert extract_value({"String": "plain", "Number": [1]}) == "plain"
        assert extract_value({"Number": 1.5}) == "1.5"

    def test_number_keeps_full_precision(self) -> None:
        assert extract_value({"Number": 1234567.5}) == "1234567.5"
        assert extract_value({"Number": [78.29123], "Unit": "°C"}) == "78.29123 °C"
        assert extract_value({"Number": [760]}) == "760"

    def test_non_numeric_number_is_absent(self) -> None:
        assert extract_value({"Number": ["n/a"]}) is None
        assert extract_value({"Number": True}) is None


class TestStringsAndUrls:

    def test_collects_markup_urls_and_dedupes(self) -> None:
        value = {
            "StringWithMarkup": [
                {"String": "Flammable", "Markup": [{"URL": "https://x/GHS02.svg"}, {"Href": "https://x/more"}]},
                {"String": "Flammable"},
            ],
            "Markup": [{"URL": "https://x/GHS02.svg"}],
        }

        strings, urls = collect_strings_and_urls(value)

        assert strings == ["Flammable"]
        assert urls == ["https://x/GHS02.svg", "https://x/more"]

    def test_non_dict_value(self) -> None:
        assert collect_strings_and_urls(None) == ([], [])


class TestGhsClassification:

    def test_parses_signal_pictograms_and_statements(self, ethanol_record) -> None:
        signal, pictograms, statements = parse_ghs_classification(ethanol_record)

        assert signal == "Danger"
        assert pictograms == ["flame", "exclamation"]
        assert len(statements) == 2
        assert statements[0].startswith("H225")
        assert all("H" in s for s in statements)

    def test_no_ghs_section(self) -> None:
        assert parse_ghs_classification({"Record": {"Section": []}}) == (None, [], [])

    def test_free_text_outside_pictogram_items_is_ignored(self) -> None:
        record = {"Record": {"Section": [{
            "TOCHeading": "GHS Classification",
            "Information": [{"Name": "Note", "Value": {"String": "Keep away from flame"}}],
        }]}}

        assert parse_ghs_classification(record) == (None, [], [])

    def test_find_section_is_case_insensitive(self, ethanol_record) -> None:
        section = find_section(ethanol_record, "ghs classification")
        assert section is not None
        assert section["TOCHeading"] == "GHS Classification"
