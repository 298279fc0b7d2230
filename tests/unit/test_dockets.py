import pytest

from judicial_monitor.service.dockets import normalize_docket, parse_docket_list
from judicial_monitor.service.exceptions import InvalidDocketError


class TestNormalizeDocket:
    def test_strips_whitespace(self) -> None:
        assert normalize_docket("  11001 3103 003 2020 00123 00 ") == "11001310300320200012300"

    def test_keeps_hyphens(self) -> None:
        assert normalize_docket("11001-31-03-003-2020-00123-00") == "11001-31-03-003-2020-00123-00"

    def test_rejects_short_docket(self) -> None:
        with pytest.raises(InvalidDocketError, match="shorter than 10"):
            normalize_docket("123456789")

    def test_rejects_letters(self) -> None:
        with pytest.raises(InvalidDocketError, match="digits and hyphens"):
            normalize_docket("11001ABC0320200012300")

    def test_invalid_docket_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            normalize_docket("")


class TestParseDocketList:
    def test_splits_on_newlines_commas_and_semicolons(self) -> None:
        text = (
            "11001310300320200012300\n05001310300120210004500,"
            "76001310300220220001100;68001310300420230009900"
        )

        assert parse_docket_list(text) == [
            "11001310300320200012300",
            "05001310300120210004500",
            "76001310300220220001100",
            "68001310300420230009900",
        ]

    def test_drops_short_entries_and_blanks(self) -> None:
        assert parse_docket_list("\n\n123, ,11001310300320200012300\n") == [
            "11001310300320200012300"
        ]

    def test_deduplicates_keeping_first(self) -> None:
        text = "05001310300120210004500\n11001310300320200012300\n 05001310300120210004500 "

        assert parse_docket_list(text) == [
            "05001310300120210004500",
            "11001310300320200012300",
        ]

    def test_empty_text(self) -> None:
        assert parse_docket_list("") == []
