"""
Tests for CSV line parsing and document splitting
"""
from tracker.csv_parser import parse_line, split_csv_document
from tracker.export import to_csv


class TestParseLine:
    def test_plain_fields(self):
        assert parse_line("a,b,c") == ["a", "b", "c"]

    def test_fields_are_trimmed(self):
        assert parse_line("  a , b ,c  ") == ["a", "b", "c"]

    def test_empty_fields_are_kept(self):
        assert parse_line("a,,c,") == ["a", "", "c", ""]

    def test_empty_line(self):
        assert parse_line("") == [""]

    def test_quoted_field_with_delimiter(self):
        assert parse_line('1,"Globex, Inc",Pune') == ["1", "Globex, Inc", "Pune"]

    def test_quoted_field_at_end(self):
        assert parse_line('1,"a,b"') == ["1", "a,b"]

    def test_doubled_quote_is_unescaped(self):
        assert parse_line('"say ""hi""",x') == ['say "hi"', "x"]

    def test_quote_inside_unquoted_field_is_literal(self):
        assert parse_line('ab"c,d') == ['ab"c', "d"]

    def test_unterminated_quote_is_best_effort(self):
        assert parse_line('"abc,def') == ["abc,def"]

    def test_round_trip_through_export(self, issue_factory):
        issue = issue_factory(
            issue_id="7",
            client='Quote "Co", Ltd',
            city="Pune",
            issue="Line, with comma",
            raised_at="2025-01-01",
        )
        line = to_csv([issue]).split("\n")[1]
        assert parse_line(line) == list(issue.values())


class TestSplitDocument:
    def test_headers_and_rows(self):
        headers, rows = split_csv_document("A,B\n1,2\n3,4\n")
        assert headers == ["A", "B"]
        assert rows == [["1", "2"], ["3", "4"]]

    def test_crlf_and_blank_lines(self):
        headers, rows = split_csv_document("A,B\r\n\r\n1,2\r\n")
        assert headers == ["A", "B"]
        assert rows == [["1", "2"]]

    def test_bom_is_stripped(self):
        headers, _ = split_csv_document("﻿Issue ID,Client\n1,Acme")
        assert headers == ["Issue ID", "Client"]

    def test_empty_document(self):
        assert split_csv_document("") == ([], [])
        assert split_csv_document("\n\n") == ([], [])
