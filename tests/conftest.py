"""
Pytest configuration and shared fixtures

Provides sample sheet exports and Issue factories so the pipeline can be
tested without network access.
"""
import os
import sys
from datetime import datetime

import pandas as pd
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tracker.models import Issue  # noqa: E402


FIXED_NOW = pd.Timestamp("2025-04-01 12:00:00")

SCENARIO_CSV = "Issue ID,Client,Resolved Y/N,Next Follow Up Date\n1,Acme,N,\n2,Acme,Y,\n3,,N,2025-01-01\n"

SHEET_CSV = (
    "Issue ID,Client,City,Issue,Vehicle Number,Priority (High/Med/Low),Assigned To,"
    "Timestamp Issues Raised,Resolved Y/N,Next Follow Up Date\n"
    'ISS-1,Acme,Mumbai,GPS not working,MH01,High,Bob,2025-01-01,N,\n'
    'ISS-2,"Globex, Inc",Pune,Device offline,MH12,Medium,Alice,2025-02-10,Y,\n'
    'ISS-3,Initech,Mumbai,GPS not working,MH14,Low,Bob,2025-03-01,N,2025-04-10\n'
    'ISS-4,n/a,Delhi,Fuel sensor,DL01,High,Carol,2025-03-05,N,\n'
    'ISS-5,Acme,Delhi,Fuel sensor,DL02,,,not a date,Yes,\n'
)


def make_issue(**kwargs) -> Issue:
    defaults = {"issue_id": "ISS-X", "client": "Acme"}
    defaults.update(kwargs)
    return Issue(**defaults)


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2025, 4, 1, 12, 0, 0)


@pytest.fixture
def issue_factory():
    return make_issue


@pytest.fixture
def sample_issues():
    return [
        make_issue(issue_id="1", client="Acme", city="Mumbai", issue="GPS", priority="High",
                   assigned_to="Bob", raised_at="2025-01-01", resolved="N"),
        make_issue(issue_id="2", client="Globex", city="Pune", issue="Offline", priority="Medium",
                   assigned_to="Alice", raised_at="2025-02-10", resolved="Y"),
        make_issue(issue_id="3", client="Initech", city="Mumbai", issue="GPS", priority="Low",
                   assigned_to="Bob", raised_at="2025-03-01", resolved="N", next_follow_up="2025-04-10"),
        make_issue(issue_id="4", client="Acme", city="", issue="", priority="",
                   assigned_to="", raised_at="garbage", resolved="true"),
    ]


@pytest.fixture
def sheet_csv():
    return SHEET_CSV


@pytest.fixture
def scenario_csv():
    return SCENARIO_CSV
