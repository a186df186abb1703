"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import json
from decimal import Decimal
from typing import Any, Dict

import pytest

from project_insights.config import InsightsConfig, reload_config
from project_insights.config.logging_config import reset_logging
from project_insights.models import Activity, Expense, Project, Sprint, Task, TimeEntry, User


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'API_BASE_URL': 'https://backend.test/api',
        'API_TOKEN': 'test-token',
        'TENANT_ID': 'tenant-1',
        'DEFAULT_CURRENCY': 'USD',
        'ENVIRONMENT': 'testing',
        'DEBUG': 'false',
        'LOG_LEVEL': 'WARNING',
        'MAX_RETRIES': '2',
        'RETRY_DELAY': '0',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    # Clear the global config to force reload with test values
    import project_insights.config.settings
    project_insights.config.settings._config = None

    yield test_env_vars

    # Clean up
    project_insights.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> InsightsConfig:
    """Test configuration instance."""
    return reload_config()


@pytest.fixture(autouse=True)
def clean_logging():
    """Remove handlers installed by CLI invocations."""
    yield
    reset_logging()


@pytest.fixture
def today() -> dt.date:
    """Fixed reference date for date-sensitive calculations."""
    return dt.date(2024, 6, 15)


@pytest.fixture
def sample_project() -> Project:
    """Time and materials project billed in USD."""
    return Project(
        id="p1",
        name="Website Redesign",
        status="active",
        progress=40,
        budget=Decimal("10000"),
        actual_cost=Decimal("4000"),
        currency="USD",
        billing_model="time_and_materials",
        estimated_duration=Decimal("100"),
        default_bill_rate_per_hour=Decimal("100"),
        deadline=dt.date(2024, 7, 31),
        created_date=dt.date(2024, 3, 1),
    )


@pytest.fixture
def sample_users():
    """Two staff members and a client."""
    return [
        User(email="ann@example.com", full_name="Ann Lee", hourly_rate=Decimal("40"),
             ctc_currency="USD", job_title="Developer"),
        User(email="bob@example.com", full_name="Bob Roy", hourly_rate=Decimal("30"),
             ctc_currency="USD"),
        User(email="cli@example.com", full_name="Carl Client", custom_role="client"),
    ]


@pytest.fixture
def sample_tasks():
    """Tasks for project p1 in mixed states."""
    return [
        Task(id="t1", project_id="p1", title="Design mockups", status="completed",
             priority="high", assigned_to=["ann@example.com"], due_date=dt.date(2024, 5, 1),
             estimated_hours=Decimal("10"), sprint_id="s1"),
        Task(id="t2", project_id="p1", title="Build pages", status="in_progress",
             priority="medium", assigned_to=["ann@example.com"], due_date=dt.date(2024, 6, 1),
             estimated_hours=Decimal("20"), sprint_id="s1"),
        Task(id="t3", project_id="p1", title="QA pass", status="todo",
             priority="urgent", assigned_to=["bob@example.com"], due_date=dt.date(2024, 7, 1),
             estimated_hours=Decimal("8"), sprint_id="s1"),
    ]


@pytest.fixture
def sample_entries():
    """Approved billable, draft and non-billable time entries."""
    return [
        TimeEntry(id="e1", date=dt.date(2024, 6, 3), project_id="p1",
                  user_email="ann@example.com", total_minutes=600, is_billable=True,
                  status="approved", hourly_rate=Decimal("40"), work_type="development"),
        TimeEntry(id="e2", date=dt.date(2024, 6, 4), project_id="p1",
                  user_email="bob@example.com", total_minutes=120, is_billable=True,
                  status="approved", work_type="meeting"),
        TimeEntry(id="e3", date=dt.date(2024, 6, 5), project_id="p1",
                  user_email="ann@example.com", total_minutes=60, is_billable=False,
                  status="approved", work_type="development"),
        TimeEntry(id="e4", date=dt.date(2024, 6, 6), project_id="p1",
                  user_email="bob@example.com", total_minutes=90, is_billable=True,
                  status="draft"),
    ]


@pytest.fixture
def sample_expenses():
    return [
        Expense(id="x1", project_id="p1", amount=Decimal("250"), currency="USD",
                status="approved"),
        Expense(id="x2", project_id="p1", amount=Decimal("999"), currency="USD",
                status="draft"),
    ]


@pytest.fixture
def sample_sprints():
    return [Sprint(id="s1", name="Sprint 1", start_date=dt.date(2024, 6, 1),
                   end_date=dt.date(2024, 6, 14))]


@pytest.fixture
def sample_activities():
    return [
        Activity(project_id="p1", action="completed", entity_type="task",
                 entity_name="Design mockups", user_name="Ann Lee",
                 created_date="2024-06-10T09:00:00Z"),
        Activity(project_id="p1", action="created", entity_type="task",
                 entity_name="QA pass", user_name="Bob Roy",
                 created_date="2024-06-01T12:00:00Z"),
    ]


@pytest.fixture
def snapshot_data() -> Dict[str, Any]:
    """Raw backend-shaped records for snapshot based CLI tests."""
    return {
        "projects": [
            {"_id": "p1", "name": "Website Redesign", "status": "active", "progress": 40,
             "budget": 10000, "actual_cost": 4000, "currency": "USD",
             "billing_model": "time_and_materials", "estimated_duration": 100,
             "default_bill_rate_per_hour": 100, "deadline": "2024-07-31",
             "created_date": "2024-03-01"},
            {"_id": "p2", "name": "Mobile App", "status": "completed", "progress": 100,
             "budget": 5000, "currency": "USD", "billing_model": "fixed_price",
             "contract_amount": 8000},
        ],
        "timesheets": [
            {"_id": "e1", "date": "2024-06-03", "project_id": "p1",
             "user_email": "ann@example.com", "total_minutes": 600, "is_billable": True,
             "status": "approved", "hourly_rate": 40},
            {"_id": "e2", "date": "2024-06-04", "project_id": {"_id": "p2"},
             "user_email": "bob@example.com", "total_minutes": 120, "is_billable": True,
             "status": "approved"},
        ],
        "tasks": [
            {"_id": "t1", "project_id": "p1", "title": "Design mockups",
             "status": "completed", "priority": "high", "assigned_to": "ann@example.com",
             "sprint_id": "s1"},
            {"_id": "t2", "project_id": "p1", "title": "Build pages",
             "status": "in_progress", "priority": "medium",
             "assigned_to": ["ann@example.com"], "due_date": "2024-06-01",
             "sprint_id": "s1"},
        ],
        "users": [
            {"email": "ann@example.com", "full_name": "Ann Lee", "hourly_rate": 40,
             "ctc_currency": "USD", "job_title": "Developer", "role": "admin"},
            {"email": "bob@example.com", "full_name": "Bob Roy", "hourly_rate": 30,
             "ctc_currency": "USD", "role": "user"},
        ],
        "sprints": [{"_id": "s1", "name": "Sprint 1"}],
        "activities": [
            {"project_id": "p1", "action": "completed", "entity_type": "task",
             "entity_name": "Design mockups", "user_name": "Ann Lee",
             "created_date": "2024-06-10T09:00:00Z"},
        ],
        "expenses": [
            {"_id": "x1", "project_id": "p1", "amount": 250, "currency": "USD",
             "status": "approved"},
        ],
    }


@pytest.fixture
def snapshot_file(tmp_path, snapshot_data):
    """Snapshot JSON file on disk."""
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_data), encoding="utf-8")
    return path
