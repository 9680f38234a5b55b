"""
Tests for record normalization and source loading
"""
import httpx
import pytest

from tracker.config import SourceConfig
from tracker.data import (
    DEMO_ISSUES,
    SOURCE_DEMO,
    SOURCE_FILE,
    SOURCE_SHEET,
    is_usable_client,
    load_issues,
    normalize,
    parse_issues_csv,
    row_mapping,
)
from tracker.metrics_summary import summarize
from tracker.models import IssueDataError


class TestClientGate:
    @pytest.mark.parametrize("value", ["", " ", "A", "undefined", "NULL", "Unknown", "n/a", "N/A"])
    def test_placeholders_rejected(self, value):
        assert not is_usable_client(value)

    @pytest.mark.parametrize("value", ["Acme", "AB", "Globex, Inc"])
    def test_real_clients_accepted(self, value):
        assert is_usable_client(value)


class TestNormalize:
    def test_missing_trailing_values_default_to_empty(self):
        assert row_mapping(["A", "B", "C"], ["1"]) == {"A": "1", "B": "", "C": ""}

    def test_rows_without_client_are_dropped(self):
        issues = normalize(["Client", "City"], [["Acme", "Pune"], ["", "Delhi"], ["null", "Goa"]])
        assert [i.city for i in issues] == ["Pune"]

    def test_order_is_preserved_without_dedup(self):
        rows = [["Acme", "1"], ["Beta", "2"], ["Acme", "1"]]
        issues = normalize(["Customer", "ID"], rows)
        assert [(i.client, i.issue_id) for i in issues] == [("Acme", "1"), ("Beta", "2"), ("Acme", "1")]

    def test_synonym_headers(self):
        headers = ["ID", "Company", "Location", "Problem", "Vehicle No", "Severity", "Owner",
                   "Created Date", "Resolution Status", "Follow Up Date"]
        row = ["9", "Acme", "Pune", "Broken", "MH01", "High", "Bob", "2025-01-01", "No", "2025-02-01"]
        issue = normalize(headers, [row])[0]
        assert issue.issue_id == "9"
        assert issue.client == "Acme"
        assert issue.city == "Pune"
        assert issue.issue == "Broken"
        assert issue.vehicle_number == "MH01"
        assert issue.priority == "High"
        assert issue.assigned_to == "Bob"
        assert issue.raised_at == "2025-01-01"
        assert issue.resolved == "No"
        assert issue.next_follow_up == "2025-02-01"

    def test_absent_fields_are_empty_strings(self):
        issue = normalize(["Client"], [["Acme"]])[0]
        assert issue.priority == ""
        assert issue.vehicle_number == ""
        assert issue.next_follow_up == ""


class TestParseIssuesCsv:
    def test_scenario(self, scenario_csv):
        issues = parse_issues_csv(scenario_csv)
        assert [i.issue_id for i in issues] == ["1", "2"]
        assert summarize(issues) == {"total": 2, "open": 1, "closed": 1, "on_hold": 0}

    def test_full_sheet(self, sheet_csv):
        issues = parse_issues_csv(sheet_csv)
        assert [i.issue_id for i in issues] == ["ISS-1", "ISS-2", "ISS-3", "ISS-5"]
        assert issues[1].client == "Globex, Inc"
        assert issues[3].raised_at == "not a date"

    def test_header_only_raises(self):
        with pytest.raises(IssueDataError):
            parse_issues_csv("Client,City\n")

    def test_no_usable_client_raises(self):
        with pytest.raises(IssueDataError):
            parse_issues_csv("Client,City\n,Pune\nnull,Goa\n")


class TestLoadIssues:
    def _client(self, status_code=200, text=""):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, text=text)

        return httpx.Client(transport=httpx.MockTransport(handler))

    def test_sheet_source(self, sheet_csv):
        config = SourceConfig(sheet_id="abc", sheet_name="Issues", csv_url="", csv_path="")
        result = load_issues(config, client=self._client(text=sheet_csv))
        assert result.source == SOURCE_SHEET
        assert not result.degraded
        assert len(result.issues) == 4

    def test_export_url(self):
        config = SourceConfig(sheet_id="abc", sheet_name="Issues", csv_url="", csv_path="")
        assert config.export_url() == (
            "https://docs.google.com/spreadsheets/d/abc/gviz/tq?tqx=out:csv&sheet=Issues"
        )

    def test_http_error_falls_back_to_demo(self):
        config = SourceConfig(csv_url="https://example.test/issues.csv", csv_path="")
        result = load_issues(config, client=self._client(status_code=500))
        assert result.source == SOURCE_DEMO
        assert result.degraded
        assert result.issues == DEMO_ISSUES
        assert result.message

    def test_short_document_falls_back_to_demo(self):
        config = SourceConfig(csv_url="https://example.test/issues.csv", csv_path="")
        result = load_issues(config, client=self._client(text="Client\n"))
        assert result.source == SOURCE_DEMO

    def test_unconfigured_source_uses_demo(self):
        result = load_issues(SourceConfig(sheet_id="", csv_url="", csv_path=""))
        assert result.source == SOURCE_DEMO
        assert len(result.issues) == 5

    def test_file_source(self, tmp_path, sheet_csv):
        path = tmp_path / "issues.csv"
        path.write_text(sheet_csv, encoding="utf-8")
        result = load_issues(SourceConfig(csv_path=str(path)))
        assert result.source == SOURCE_FILE
        assert len(result.issues) == 4

    def test_missing_file_falls_back_to_demo(self, tmp_path):
        result = load_issues(SourceConfig(csv_path=str(tmp_path / "missing.csv")))
        assert result.source == SOURCE_DEMO
