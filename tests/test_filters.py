"""
Tests for filter criteria and the filter engine
"""
import pytest

from tracker.filters import IssueFilters, apply_filters, filter_options, normalize_filters


class TestNormalizeFilters:
    def test_defaults(self):
        assert normalize_filters({}) == IssueFilters()
        assert normalize_filters(None).is_default()

    def test_blank_values_mean_all(self):
        f = normalize_filters({"city": "", "client": None, "search": "gps "})
        assert f.city == "All"
        assert f.client == "All"
        assert f.search == "gps "

    def test_search_is_kept_as_typed(self):
        f = normalize_filters({"search": " "})
        assert f.search == " "
        assert not f.is_default()

    def test_with_value(self):
        f = IssueFilters().with_value("city", "Pune")
        assert f.city == "Pune"
        assert f.with_value("city", None).city == "All"

    def test_with_unknown_filter(self):
        with pytest.raises(KeyError):
            IssueFilters().with_value("month", "Jan")


class TestApplyFilters:
    def test_default_is_identity(self, sample_issues):
        assert apply_filters(sample_issues, IssueFilters()) == sample_issues

    def test_search_over_all_fields(self, sample_issues):
        assert [i.issue_id for i in apply_filters(sample_issues, IssueFilters(search="gps"))] == ["1", "3"]
        assert [i.issue_id for i in apply_filters(sample_issues, IssueFilters(search="GLOBEX"))] == ["2"]
        assert [i.issue_id for i in apply_filters(sample_issues, IssueFilters(search="2025-04-10"))] == ["3"]

    def test_search_no_match(self, sample_issues):
        assert apply_filters(sample_issues, IssueFilters(search="zzz")) == []

    def test_equality_filters_are_case_sensitive(self, sample_issues):
        assert [i.issue_id for i in apply_filters(sample_issues, IssueFilters(city="Mumbai"))] == ["1", "3"]
        assert apply_filters(sample_issues, IssueFilters(city="mumbai")) == []

    def test_combined_filters(self, sample_issues):
        f = IssueFilters(client="Acme", assigned_to="Bob", priority="High")
        assert [i.issue_id for i in apply_filters(sample_issues, f)] == ["1"]

    def test_status_filter(self, sample_issues):
        assert [i.issue_id for i in apply_filters(sample_issues, IssueFilters(status="Open"))] == ["1"]
        assert [i.issue_id for i in apply_filters(sample_issues, IssueFilters(status="Closed"))] == ["2"]
        assert [i.issue_id for i in apply_filters(sample_issues, IssueFilters(status="On Hold"))] == ["3"]

    def test_idempotent(self, sample_issues):
        f = IssueFilters(search="a", city="Mumbai")
        once = apply_filters(sample_issues, f)
        assert apply_filters(once, f) == once


class TestFilterOptions:
    def test_unique_sorted_non_empty(self, sample_issues):
        options = filter_options(sample_issues)
        assert options["city"] == ["Mumbai", "Pune"]
        assert options["client"] == ["Acme", "Globex", "Initech"]
        assert options["assigned_to"] == ["Alice", "Bob"]
        assert options["priority"] == ["High", "Low", "Medium"]
        assert options["status"] == ["Open", "Closed", "On Hold"]
