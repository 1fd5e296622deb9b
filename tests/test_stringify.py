"""Tests for table to text serialization."""

import pytest

from lenient_csv.models import ParsedTable, StringifyOptions
from lenient_csv.parser import parse
from lenient_csv.stringify import InvalidTableError, quote_cell, stringify


class TestStringify:
    def test_plain_table(self):
        assert stringify([["a", "b"], ["1", "2"]]) == "a,b\n1,2"

    def test_trims_trailing_empty_columns(self):
        assert stringify([["A", "B", "", ""], ["x", "y"]]) == "A,B\nx,y"

    def test_trims_trailing_empty_rows_before_columns(self):
        assert stringify([["A"], ["x"], ["", ""], []]) == "A\nx"

    def test_trimming_everything_leaves_nothing(self):
        assert stringify([["", ""], [""]]) == ""

    def test_without_trimming_rows_are_padded(self):
        assert stringify([["A", "B", ""], ["x"]], trim_empty=False) == "A,B,\nx,,"

    def test_short_rows_are_padded(self):
        assert stringify([["a", "b", "c"], ["1"]]) == "a,b,c\n1,,"

    def test_quotes_only_when_needed(self):
        row = ["a,b", 'say "hi"', "line\nbreak", "plain", "a;b", "cr\ronly"]

        assert stringify([row]) == '"a,b","say ""hi""","line\nbreak",plain,a;b,cr\ronly'

    def test_custom_quote_and_separator(self):
        assert stringify([["a;b", "c'd", "e,f"]], quote="'", separator=";") == "'a;b';'c''d';e,f"

    def test_line_ends(self):
        table = [["a"], ["b"]]

        assert stringify(table, line_end="\r\n") == "a\r\nb"
        assert stringify(table, line_end="\r") == "a\rb"
        assert stringify(table, line_end="\t") == "a\nb"
        assert stringify(table, line_end="\r\n", trailing_line_end=True) == "a\r\nb\r\n"

    def test_invalid_dialect_characters_fall_back(self):
        options = StringifyOptions(quote="''", separator="\n")

        assert options.quote == '"'
        assert options.separator == ","
        assert stringify([["a,b", "c"]], options) == '"a,b",c'

    def test_none_and_non_string_cells(self):
        assert stringify([["a", None, 3], [True, "", 1.5]]) == "a,,3\nTrue,,1.5"

    def test_mapping_with_rows(self):
        document = {"header": ["a", "b"], "rows": [["1", "2"]]}

        assert stringify(document) == "a,b\n1,2"

    def test_mapped_rows_are_laid_out_by_header(self):
        document = {
            "header": ["a", "b"],
            "rows": [],
            "mappedRows": [{"b": "2", "a": "1"}, {"a": "3", "z": "ignored"}],
        }

        assert stringify(document) == "a,b\n1,2\n3,"

    def test_rows_take_precedence_over_mapped_rows(self):
        document = {"header": ["a"], "rows": [["1"]], "mapped_rows": [{"a": "2"}]}

        assert stringify(document) == "a\n1"

    def test_parsed_table(self):
        table = ParsedTable(header=["a", "b"], mapped_rows=[{"a": "1", "b": "x,y"}])

        assert stringify(table) == 'a,b\n1,"x,y"'

    def test_input_is_not_modified(self):
        table = [["A", "B", ""], ["x", "y", ""]]
        stringify(table)

        assert table == [["A", "B", ""], ["x", "y", ""]]

    def test_empty_list(self):
        assert stringify([]) == ""


class TestInvalidInput:
    @pytest.mark.parametrize("table", ["a,b", 42, None, b"a,b"])
    def test_not_a_table(self, table):
        with pytest.raises(InvalidTableError):
            stringify(table)

    def test_row_is_not_a_list(self):
        with pytest.raises(InvalidTableError) as exc_info:
            stringify([["a"], "b"])

        assert "Row 1" in str(exc_info.value)

    def test_mapped_row_is_not_a_mapping(self):
        with pytest.raises(InvalidTableError):
            stringify({"header": ["a"], "mappedRows": [["1"]]})

    def test_is_a_type_error(self):
        with pytest.raises(TypeError):
            stringify(object())


class TestRoundTrip:
    def test_safe_content(self):
        table = [["h1", "h2", "h3"], ["v1", "v2", "v3"], ["x", "y z", "!"]]
        parsed = parse(stringify(table))

        assert parsed.header == table[0]
        assert parsed.rows == table[1:]

    def test_restringify_is_stable(self):
        table = [["name", "note"], ["a,b", 'x "y"'], ["multi\nline", "z"], [" padded ", ""]]
        text = stringify(table)

        assert stringify(parse(text)) == text

    def test_parsed_cells_survive_quoting(self):
        table = [["name", "note"], ["a,b", 'x "y"'], ["multi\nline", '"']]

        assert parse(stringify(table)).rows == table[1:]

    def test_custom_dialect_round_trip(self):
        table = [["a", "b;c"], ["d'e", "f"]]
        text = stringify(table, quote="'", separator=";")

        assert parse(text, quote="'", separators=";").rows == table[1:]

    @pytest.mark.parametrize("cell", ["plain", "with space", "a,b", 'q"q', "l\nf"])
    def test_quote_cell_iff_needed(self, cell):
        needs_quotes = "," in cell or '"' in cell or "\n" in cell

        assert quote_cell(cell, '"', ",").startswith('"') == needs_quotes
