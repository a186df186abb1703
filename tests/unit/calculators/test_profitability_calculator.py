"""Unit tests for profitability calculations."""

from decimal import Decimal

import pytest

from project_insights.calculators.currency import RateTable
from project_insights.calculators.profitability_calculator import (
    calculate_profitability,
    classify_margin,
    expense_budget_for_project,
    resolve_entry_rate,
    revenue_for_project,
)
from project_insights.models import Expense, Project, Task, TimeEntry, User


def approved(project_id="p1", minutes=60, rate=None, email="a@x.com", **kwargs):
    return TimeEntry(
        project_id=project_id,
        user_email=email,
        total_minutes=minutes,
        is_billable=True,
        status="approved",
        hourly_rate=rate,
        **kwargs,
    )


class TestRevenueForProject:
    """Test revenue recognition per billing model."""

    def test_fixed_price_uses_contract_then_budget(self):
        assert revenue_for_project(
            Project(billing_model="fixed_price", contract_amount=800, budget=500)
        ) == (Decimal("800.00"), "Fixed Price")
        assert revenue_for_project(Project(billing_model="fixed_price", budget=500))[0] == (
            Decimal("500.00")
        )

    def test_retainer(self):
        assert revenue_for_project(
            Project(billing_model="retainer", retainer_amount=300, contract_amount=900)
        ) == (Decimal("300.00"), "Retainer Amt")

    def test_time_and_materials(self):
        project = Project(
            billing_model="time_and_materials",
            estimated_duration=120,
            default_bill_rate_per_hour="75.5",
        )

        assert revenue_for_project(project) == (Decimal("9060.00"), "Est. T&M Value")

    def test_non_billable_has_no_revenue(self):
        assert revenue_for_project(Project(billing_model="non_billable", budget=999)) == (
            Decimal("0.00"),
            "Non-Billable",
        )

    def test_unknown_model_falls_back(self):
        amount, label = revenue_for_project(Project(budget=700))

        assert amount == Decimal("700.00")
        assert label == "Contract Amount"


class TestClassifyMargin:
    @pytest.mark.parametrize(
        "margin,status",
        [
            (Decimal("20.01"), "Healthy"),
            (Decimal("20"), "Warning"),
            (Decimal("10"), "Warning"),
            (Decimal("9.99"), "Risk"),
            (Decimal("0"), "Risk"),
            (Decimal("-0.01"), "Loss"),
        ],
    )
    def test_thresholds(self, margin, status):
        assert classify_margin(margin) == status


class TestResolveEntryRate:
    def test_priority_order(self):
        profile = Decimal("10")

        assert resolve_entry_rate(
            TimeEntry(snapshot_hourly_rate=40, snapshot_rate=30, hourly_rate=20), profile
        ) == Decimal("40")
        assert resolve_entry_rate(TimeEntry(snapshot_rate=30, hourly_rate=20), profile) == (
            Decimal("30")
        )
        assert resolve_entry_rate(TimeEntry(hourly_rate=20), profile) == Decimal("20")
        assert resolve_entry_rate(TimeEntry(), profile) == Decimal("10")


class TestExpenseBudget:
    def test_time_and_materials_multiplies_by_duration(self):
        project = Project(billing_model="time_and_materials", expense_budget=5, estimated_duration=10)

        assert expense_budget_for_project(project) == Decimal("50.00")

    def test_other_models_use_budget_as_is(self):
        assert expense_budget_for_project(Project(expense_budget=75)) == Decimal("75.00")


class TestCalculateProfitability:
    """Test suite for calculate_profitability."""

    def test_labor_cost_for_three_approved_entries(self):
        """Test that 60/90/30 minutes at 50 per hour cost 150."""
        project = Project(id="p1", name="Alpha", billing_model="fixed_price", contract_amount=1000)
        entries = [approved(minutes=m, rate=50) for m in (60, 90, 30)]

        report = calculate_profitability([project], entries, RateTable("INR"))

        row = report.rows[0]
        assert row.total_labor_cost == Decimal("150.00")
        assert row.total_approved_hours == Decimal("3.00")
        assert row.profit == Decimal("850.00")
        assert row.margin_percentage == Decimal("85.00")
        assert row.status == "Healthy"

    def test_sample_project(
        self, sample_project, sample_entries, sample_expenses, sample_users, sample_tasks
    ):
        """Test costs, hours, leakage and details for a T&M project."""
        report = calculate_profitability(
            [sample_project],
            sample_entries,
            RateTable("USD"),
            expenses=sample_expenses,
            users=sample_users,
            tasks=sample_tasks,
        )

        row = report.rows[0]
        assert row.revenue_amount == Decimal("10000.00")
        assert row.total_logged_hours == Decimal("14.50")
        assert row.total_approved_hours == Decimal("12.00")
        assert row.total_labor_cost == Decimal("460.00")
        assert row.total_logged_labor_cost == Decimal("545.00")
        assert row.total_non_labor_cost == Decimal("250.00")
        assert row.total_cost == Decimal("710.00")
        assert row.profit == Decimal("9290.00")
        assert row.margin_percentage == Decimal("92.90")
        assert row.project_leakage == Decimal("85.00")
        assert row.budget_used_percentage is None
        assert row.milestone_coverage == Decimal("0.00")
        assert not row.rates_are_estimate

        details = {d.user_email: d for d in row.details}
        assert details["ann@example.com"].user_name == "Ann Lee"
        assert details["ann@example.com"].logged_hours == Decimal("11.00")
        assert details["ann@example.com"].approved_hours == Decimal("10.00")
        assert details["ann@example.com"].cost == Decimal("400.00")
        assert details["ann@example.com"].hourly_rate == Decimal("40.00")
        assert details["bob@example.com"].hourly_rate == Decimal("30.00")
        assert details["bob@example.com"].sprint_name == "Backlog/General"
        assert details["bob@example.com"].task_title == "General Task"

    def test_cost_identities_hold_for_every_row(
        self, sample_project, sample_entries, sample_expenses, sample_users
    ):
        other = Project(id="p2", name="Other", billing_model="fixed_price", contract_amount=100)
        entries = sample_entries + [approved("p2", minutes=200, rate="33.33")]

        report = calculate_profitability(
            [sample_project, other], entries, RateTable("USD"),
            expenses=sample_expenses, users=sample_users,
        )

        for row in report.rows:
            assert row.total_cost == row.total_labor_cost + row.total_non_labor_cost
            assert row.profit == row.revenue_amount - row.total_cost
            assert row.has_leakage == (row.profit < 0)

    def test_rate_is_converted_into_project_currency(self):
        project = Project(id="p1", currency="INR", billing_model="fixed_price", contract_amount=5000)
        user = User(email="a@x.com", hourly_rate=10, ctc_currency="USD")
        rates = RateTable("INR", {("USD", "INR"): Decimal("83")})

        report = calculate_profitability([project], [approved()], rates, users=[user])

        assert report.rows[0].total_labor_cost == Decimal("830.00")
        assert not report.rows[0].rates_are_estimate

    def test_missing_rate_marks_estimate(self):
        project = Project(id="p1", currency="INR", billing_model="fixed_price", contract_amount=5000)
        user = User(email="a@x.com", hourly_rate=10, ctc_currency="USD")

        report = calculate_profitability([project], [approved()], RateTable("INR"), users=[user])

        assert report.rows[0].total_labor_cost == Decimal("10.00")
        assert report.rows[0].rates_are_estimate

    def test_unknown_projects_are_dropped(self):
        project = Project(id="p1", billing_model="fixed_price", contract_amount=100)
        entries = [approved("p1"), approved("ghost"), approved(None)]

        report = calculate_profitability([project], entries, RateTable("INR"))

        assert [row.project_id for row in report.rows] == ["p1"]

    def test_project_filter(self):
        projects = [Project(id="p1"), Project(id="p2")]
        entries = [approved("p1", rate=10), approved("p2", rate=10)]

        report = calculate_profitability(projects, entries, RateTable("INR"), project_id="p2")

        assert [row.project_id for row in report.rows] == ["p2"]
        assert report.portfolio.project_count == 1

    def test_rows_follow_first_entry_order(self):
        projects = [Project(id="p1"), Project(id="p2")]
        entries = [approved("p2"), approved("p1"), approved("p2")]

        report = calculate_profitability(projects, entries, RateTable("INR"))

        assert [row.project_id for row in report.rows] == ["p2", "p1"]

    def test_only_approved_expenses_count(self):
        project = Project(id="p1", currency="USD", billing_model="fixed_price", contract_amount=1000)
        expenses = [
            Expense(project_id="p1", amount=100, status="approved"),
            Expense(project_id="p1", amount=900, status="submitted"),
        ]

        report = calculate_profitability(
            [project], [approved(rate=0)], RateTable("USD"), expenses=expenses
        )

        assert report.rows[0].total_non_labor_cost == Decimal("100.00")

    def test_foreign_expense_with_direct_rate(self):
        project = Project(id="p1", currency="USD", billing_model="fixed_price", contract_amount=1000)
        expense = Expense(project_id="p1", amount=100, currency="EUR", status="approved")
        rates = RateTable("USD", {("EUR", "USD"): Decimal("1.1")})

        report = calculate_profitability([project], [approved()], rates, expenses=[expense])

        row = report.rows[0]
        assert row.total_non_labor_cost == Decimal("110.00")
        assert row.total_non_labor_cost_converted == Decimal("110.00")
        assert not row.non_labor_cost_is_estimate

    def test_foreign_expense_without_rate_is_estimate(self):
        project = Project(id="p1", currency="USD", billing_model="fixed_price", contract_amount=1000)
        expense = Expense(project_id="p1", amount=100, currency="EUR", status="approved")

        report = calculate_profitability(
            [project], [approved()], RateTable("USD"), expenses=[expense]
        )

        assert report.rows[0].total_non_labor_cost == Decimal("100.00")
        assert report.rows[0].non_labor_cost_is_estimate
        assert report.portfolio.is_estimate

    def test_expense_only_project(self):
        """Test that a project with approved expenses but no time gets a row."""
        project = Project(id="p1", name="Expenses Only", budget=1000, currency="USD")
        expense = Expense(project_id="p1", amount=300, status="approved")

        report = calculate_profitability([project], [], RateTable("USD"), expenses=[expense])

        row = report.rows[0]
        assert row.revenue_label == "Budget"
        assert row.total_labor_cost == Decimal("0.00")
        assert row.total_cost == Decimal("300.00")
        assert row.profit == Decimal("700.00")

    def test_non_billable_project_leaks_all_cost(self):
        project = Project(id="p1", billing_model="non_billable")

        report = calculate_profitability([project], [approved(rate=60)], RateTable("INR"))

        row = report.rows[0]
        assert row.project_leakage == Decimal("60.00")
        assert row.margin_percentage == Decimal("0.00")
        assert row.has_leakage

    def test_milestone_coverage(self):
        project = Project(id="p1")
        tasks = [
            Task(id="t1", project_id="p1", milestone_id="m1"),
            Task(id="t2", project_id="p1"),
            Task(id="t3", project_id="p1"),
            Task(id="t4", project_id="p1", milestone_id="m2"),
        ]

        report = calculate_profitability([project], [approved()], RateTable("INR"), tasks=tasks)

        assert report.rows[0].milestone_coverage == Decimal("50.00")

    def test_portfolio_is_converted_to_target_currency(self):
        projects = [
            Project(id="p1", currency="USD", billing_model="fixed_price", contract_amount=100),
            Project(id="p2", currency="INR", billing_model="fixed_price", contract_amount=8300),
        ]
        entries = [approved("p1", rate=10), approved("p2", rate=830, email="b@x.com")]
        users = [
            User(email="a@x.com", ctc_currency="USD"),
            User(email="b@x.com", ctc_currency="INR"),
        ]
        rates = RateTable("INR", {("USD", "INR"): Decimal("83")})

        portfolio = calculate_profitability(projects, entries, rates, users=users).portfolio

        assert portfolio.target_currency == "INR"
        assert portfolio.total_revenue == Decimal("16600.00")
        assert portfolio.total_labor_cost == Decimal("1660.00")
        assert portfolio.total_profit == Decimal("14940.00")
        assert portfolio.overall_margin == Decimal("90.00")
        assert not portfolio.is_estimate

    def test_empty_input(self):
        report = calculate_profitability([], [], RateTable("INR"))

        assert report.rows == ()
        assert report.portfolio.total_revenue == Decimal("0.00")
        assert report.portfolio.overall_margin == Decimal("0.00")
        assert report.portfolio.overall_budget_used is None

    def test_calculation_is_idempotent(self, sample_project, sample_entries, sample_users):
        first = calculate_profitability([sample_project], sample_entries, RateTable("USD"), users=sample_users)
        second = calculate_profitability([sample_project], sample_entries, RateTable("USD"), users=sample_users)

        assert first == second
