"""Project profitability calculations.

This module computes, per project:
- Revenue from the project's billing model
- Labor cost from approved, billable time at each entry's effective rate
- Non-labor cost from approved expenses
- Profit, margin and margin status
- Expense budget usage, profit leakage and milestone coverage
- Per user/sprint/task detail rows

and a portfolio summary converted into a single target currency.

Money is kept as Decimal and quantized to cents. Totals are derived from the
quantized components, so ``total_cost == total_labor_cost +
total_non_labor_cost`` and ``profit == revenue_amount - total_cost`` hold
exactly for every row.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from project_insights.calculators.currency import RateTable
from project_insights.models.project import Expense, Project
from project_insights.models.task import Sprint, Task
from project_insights.models.timesheet import TimeEntry
from project_insights.models.user import User

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")

GENERAL_TASK_LABEL = "General Task"
BACKLOG_SPRINT_LABEL = "Backlog/General"

REVENUE_LABELS = {
    "fixed_price": "Fixed Price",
    "retainer": "Retainer Amt",
    "time_and_materials": "Est. T&M Value",
    "non_billable": "Non-Billable",
}
DEFAULT_REVENUE_LABEL = "Contract Amount"


@dataclass(frozen=True)
class ProfitabilityDetail:
    """Cost breakdown for one user + sprint + task combination.

    Attributes:
        user_name: User full name, or the email when unknown
        user_email: User email
        sprint_name: Sprint name or "Backlog/General"
        task_id: Task id, None for general time
        task_title: Task title or "General Task"
        hourly_rate: Weighted effective rate over billable time, falling back
            to the first non-zero effective rate, then the profile rate
        logged_hours: All logged hours
        approved_hours: Approved and billable hours
        cost: Labor cost of approved billable hours
    """

    user_name: str
    user_email: Optional[str]
    sprint_name: str
    task_id: Optional[str]
    task_title: str
    hourly_rate: Decimal
    logged_hours: Decimal
    approved_hours: Decimal
    cost: Decimal


@dataclass(frozen=True)
class ProjectProfitability:
    """Profitability of a single project, in the project's currency.

    Attributes:
        project_id: Project id
        project_name: Project name
        currency: Project currency
        billing_model: Billing model (None when not set)
        revenue_label: Display label for the revenue figure
        revenue_amount: Revenue recognized under the billing model
        total_logged_hours: All hours logged on the project
        total_approved_hours: Approved and billable hours
        total_labor_cost: Cost of approved billable hours
        total_logged_labor_cost: Cost of all logged hours
        total_non_labor_cost: Approved expenses in project currency
        total_non_labor_cost_converted: Approved expenses in target currency
        non_labor_cost_is_estimate: True when some expenses were summed
            without conversion
        total_cost: Labor plus non-labor cost
        profit: Revenue minus total cost
        margin_percentage: Profit over revenue, 0 without revenue
        status: Healthy, Warning, Risk or Loss
        has_leakage: True when profit is negative
        expense_budget: Expense budget (times duration for T&M)
        budget_used_percentage: Total cost over expense budget, None without budget
        project_leakage: Unrecoverable cost under the billing model
        milestone_coverage: Percent of project tasks linked to a milestone
        rates_are_estimate: True when a rate conversion fell back to 1
        details: Detail rows per user + sprint + task
    """

    project_id: Optional[str]
    project_name: str
    currency: str
    billing_model: Optional[str]
    revenue_label: str
    revenue_amount: Decimal
    total_logged_hours: Decimal
    total_approved_hours: Decimal
    total_labor_cost: Decimal
    total_logged_labor_cost: Decimal
    total_non_labor_cost: Decimal
    total_non_labor_cost_converted: Decimal
    non_labor_cost_is_estimate: bool
    total_cost: Decimal
    profit: Decimal
    margin_percentage: Decimal
    status: str
    has_leakage: bool
    expense_budget: Decimal
    budget_used_percentage: Optional[Decimal]
    project_leakage: Decimal
    milestone_coverage: Decimal
    rates_are_estimate: bool = False
    details: Tuple[ProfitabilityDetail, ...] = ()


@dataclass(frozen=True)
class PortfolioProfitability:
    """Portfolio totals converted into the target currency."""

    target_currency: str
    total_revenue: Decimal
    total_labor_cost: Decimal
    total_non_labor_cost: Decimal
    total_cost: Decimal
    total_profit: Decimal
    overall_margin: Decimal
    total_expense_budget: Decimal
    overall_budget_used: Optional[Decimal]
    total_leakage: Decimal
    overall_leakage_percentage: Decimal
    overall_milestone_coverage: Decimal
    is_estimate: bool
    project_count: int


@dataclass(frozen=True)
class ProfitabilityReport:
    """Per-project rows plus portfolio totals."""

    rows: Tuple[ProjectProfitability, ...]
    portfolio: PortfolioProfitability


@dataclass
class _DetailAccumulator:
    user_name: str
    user_email: Optional[str]
    user_hourly_rate: Decimal
    user_currency: str
    task_id: Optional[str]
    task_title: str
    sprint_name: str
    logged_minutes: int = 0
    approved_billable_minutes: int = 0
    cost: Decimal = ZERO
    billable_minutes: int = 0
    billable_cost: Decimal = ZERO
    last_snapshot_rate: Decimal = ZERO


@dataclass
class _ProjectAccumulator:
    project: Project
    details: "OrderedDict[Tuple, _DetailAccumulator]" = field(default_factory=OrderedDict)
    logged_minutes: int = 0
    approved_billable_minutes: int = 0
    labor_cost: Decimal = ZERO
    logged_labor_cost: Decimal = ZERO
    rates_are_estimate: bool = False


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT)


def _hours(minutes: int) -> Decimal:
    return _quantize(Decimal(minutes) / Decimal("60"))


def revenue_for_project(project: Project) -> Tuple[Decimal, str]:
    """Determine the revenue recognized for a project under its billing model.

    Args:
        project: Project with commercial terms

    Returns:
        Tuple of (revenue amount, display label)

    Example:
        >>> revenue_for_project(Project(billing_model="time_and_materials",
        ...     estimated_duration=100, default_bill_rate_per_hour=50))
        (Decimal('5000.00'), 'Est. T&M Value')
    """
    model = project.billing_model
    if model == "fixed_price":
        amount = project.contract_amount or project.budget
    elif model == "retainer":
        amount = project.retainer_amount or project.contract_amount or project.budget
    elif model == "time_and_materials":
        amount = project.estimated_duration * project.default_bill_rate_per_hour
    elif model == "non_billable":
        amount = ZERO
    else:
        amount = project.contract_amount or project.budget
    return _quantize(amount), REVENUE_LABELS.get(model, DEFAULT_REVENUE_LABEL)


def classify_margin(margin: Decimal) -> str:
    """Classify a margin percentage.

    Returns:
        "Healthy" above 20%, "Warning" from 10%, "Risk" from 0%, else "Loss"
    """
    if margin > 20:
        return "Healthy"
    if margin >= 10:
        return "Warning"
    if margin >= 0:
        return "Risk"
    return "Loss"


def resolve_entry_rate(entry: TimeEntry, profile_rate: Decimal) -> Decimal:
    """Pick the raw hourly rate for a time entry.

    Priority is ``snapshot_hourly_rate``, ``snapshot_rate``, ``hourly_rate``
    and finally the user's profile rate; the first positive value wins.
    """
    for rate in (entry.snapshot_hourly_rate, entry.snapshot_rate, entry.hourly_rate):
        if rate > 0:
            return rate
    return profile_rate


def expense_budget_for_project(project: Project) -> Decimal:
    """Expense budget, multiplied by estimated duration for T&M projects."""
    if project.billing_model == "time_and_materials":
        return _quantize(project.expense_budget * project.estimated_duration)
    return _quantize(project.expense_budget)


def _sum_non_labor_cost(
    expenses: List[Expense], project_currency: str, rates: RateTable
) -> Tuple[Decimal, Decimal, bool]:
    """Sum approved expenses in project and target currency.

    An expense in another currency is converted only when a direct rate into
    the project currency is known; otherwise its raw amount is added and the
    total is flagged as an estimate.

    Returns:
        Tuple of (project currency total, target currency total, is_estimate)
    """
    in_project = ZERO
    in_target = ZERO
    is_estimate = False

    for expense in expenses:
        currency = expense.currency
        if currency is None or currency == project_currency:
            in_project += expense.amount
        else:
            direct = rates.lookup(currency, project_currency)
            if direct is not None:
                in_project += expense.amount * direct
            else:
                logger.warning(
                    f"No direct rate {currency}->{project_currency} for expense "
                    f"{expense.id}; adding unconverted amount as an estimate"
                )
                in_project += expense.amount
                is_estimate = True

        converted = rates.to_target(expense.amount, currency)
        in_target += converted.amount
        is_estimate = is_estimate or converted.is_approximate

    return _quantize(in_project), _quantize(in_target), is_estimate


def _project_leakage(
    billing_model: Optional[str],
    total_cost: Decimal,
    revenue: Decimal,
    labor_leakage: Decimal,
) -> Decimal:
    if billing_model == "fixed_price":
        return max(ZERO, total_cost - revenue) + labor_leakage
    if billing_model == "retainer":
        return max(ZERO, total_cost - revenue)
    if billing_model == "time_and_materials":
        return labor_leakage
    if billing_model == "non_billable":
        return total_cost
    return labor_leakage


def _milestone_coverage(project_id: Optional[str], tasks: List[Task]) -> Decimal:
    project_tasks = [task for task in tasks if task.project_id == project_id]
    if not project_tasks:
        return ZERO
    linked = sum(1 for task in project_tasks if task.milestone_id)
    return _quantize(Decimal(linked) / Decimal(len(project_tasks)) * HUNDRED)


def _percentage(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return Decimal("0.00")
    return _quantize(part / whole * HUNDRED)


def _build_row(
    group: _ProjectAccumulator,
    expenses: List[Expense],
    tasks: List[Task],
    rates: RateTable,
) -> ProjectProfitability:
    project = group.project
    revenue, label = revenue_for_project(project)

    non_labor, non_labor_converted, non_labor_estimate = _sum_non_labor_cost(
        expenses, project.currency, rates
    )
    labor = _quantize(group.labor_cost)
    logged_labor = _quantize(group.logged_labor_cost)
    total_cost = labor + non_labor
    profit = revenue - total_cost
    margin = _percentage(profit, revenue)

    expense_budget = expense_budget_for_project(project)
    budget_used = _percentage(total_cost, expense_budget) if expense_budget > 0 else None
    labor_leakage = max(ZERO, logged_labor - labor)
    leakage = _quantize(
        _project_leakage(project.billing_model, total_cost, revenue, labor_leakage)
    )

    details = []
    for detail in group.details.values():
        billable_hours = Decimal(detail.billable_minutes) / Decimal("60")
        rate = detail.billable_cost / billable_hours if billable_hours > 0 else ZERO
        if rate == 0:
            rate = detail.last_snapshot_rate or detail.user_hourly_rate
        details.append(
            ProfitabilityDetail(
                user_name=detail.user_name,
                user_email=detail.user_email,
                sprint_name=detail.sprint_name,
                task_id=detail.task_id,
                task_title=detail.task_title,
                hourly_rate=_quantize(rate),
                logged_hours=_hours(detail.logged_minutes),
                approved_hours=_hours(detail.approved_billable_minutes),
                cost=_quantize(detail.cost),
            )
        )

    return ProjectProfitability(
        project_id=project.id,
        project_name=project.name,
        currency=project.currency,
        billing_model=project.billing_model,
        revenue_label=label,
        revenue_amount=revenue,
        total_logged_hours=_hours(group.logged_minutes),
        total_approved_hours=_hours(group.approved_billable_minutes),
        total_labor_cost=labor,
        total_logged_labor_cost=logged_labor,
        total_non_labor_cost=non_labor,
        total_non_labor_cost_converted=non_labor_converted,
        non_labor_cost_is_estimate=non_labor_estimate,
        total_cost=total_cost,
        profit=profit,
        margin_percentage=margin,
        status=classify_margin(margin),
        has_leakage=profit < 0,
        expense_budget=expense_budget,
        budget_used_percentage=budget_used,
        project_leakage=leakage,
        milestone_coverage=_milestone_coverage(project.id, tasks),
        rates_are_estimate=group.rates_are_estimate,
        details=tuple(details),
    )


def _build_expense_only_row(
    project: Project, expenses: List[Expense], tasks: List[Task], rates: RateTable
) -> ProjectProfitability:
    revenue, label = revenue_for_project(project)
    if project.billing_model not in REVENUE_LABELS:
        label = "Budget"

    non_labor, non_labor_converted, non_labor_estimate = _sum_non_labor_cost(
        expenses, project.currency, rates
    )
    expense_budget = expense_budget_for_project(project)
    budget_used = _percentage(non_labor, expense_budget) if expense_budget > 0 else None

    if project.billing_model == "non_billable":
        leakage = non_labor
    elif project.billing_model in ("fixed_price", "retainer"):
        leakage = max(ZERO, non_labor - revenue)
    else:
        leakage = max(ZERO, non_labor - expense_budget)

    profit = revenue - non_labor
    margin = _percentage(profit, revenue)

    return ProjectProfitability(
        project_id=project.id,
        project_name=project.name,
        currency=project.currency,
        billing_model=project.billing_model,
        revenue_label=label,
        revenue_amount=revenue,
        total_logged_hours=Decimal("0.00"),
        total_approved_hours=Decimal("0.00"),
        total_labor_cost=Decimal("0.00"),
        total_logged_labor_cost=Decimal("0.00"),
        total_non_labor_cost=non_labor,
        total_non_labor_cost_converted=non_labor_converted,
        non_labor_cost_is_estimate=non_labor_estimate,
        total_cost=Decimal("0.00") + non_labor,
        profit=profit,
        margin_percentage=margin,
        status=classify_margin(margin),
        has_leakage=profit < 0,
        expense_budget=expense_budget,
        budget_used_percentage=budget_used,
        project_leakage=_quantize(leakage),
        milestone_coverage=_milestone_coverage(project.id, tasks),
    )


def summarize_portfolio(
    rows: Iterable[ProjectProfitability], tasks: List[Task], rates: RateTable
) -> PortfolioProfitability:
    """Convert per-project totals into the target currency and sum them.

    Args:
        rows: Project profitability rows
        tasks: All tasks, for overall milestone coverage
        rates: Rate table whose target currency is the reporting currency

    Returns:
        PortfolioProfitability in ``rates.target_currency``
    """
    rows = list(rows)
    is_estimate = False

    def to_target(amount: Decimal, currency: str) -> Decimal:
        nonlocal is_estimate
        result = rates.to_target(amount, currency)
        is_estimate = is_estimate or result.is_approximate
        return result.amount

    revenue = _quantize(sum((to_target(r.revenue_amount, r.currency) for r in rows), ZERO))
    labor = _quantize(sum((to_target(r.total_labor_cost, r.currency) for r in rows), ZERO))
    non_labor = _quantize(sum((r.total_non_labor_cost_converted for r in rows), ZERO))
    leakage = _quantize(sum((to_target(r.project_leakage, r.currency) for r in rows), ZERO))
    expense_budget = _quantize(
        sum((to_target(r.expense_budget, r.currency) for r in rows), ZERO)
    )
    is_estimate = is_estimate or any(r.non_labor_cost_is_estimate for r in rows)

    total_cost = labor + non_labor
    profit = revenue - total_cost
    overall_margin = _percentage(profit, revenue) if revenue > 0 else Decimal("0.00")
    leakage_percentage = _percentage(leakage, revenue) if revenue > 0 else Decimal("0.00")
    budget_used = _percentage(total_cost, expense_budget) if expense_budget > 0 else None

    if tasks:
        linked = sum(1 for task in tasks if task.milestone_id)
        milestone_coverage = _quantize(Decimal(linked) / Decimal(len(tasks)) * HUNDRED)
    else:
        milestone_coverage = Decimal("0.00")

    return PortfolioProfitability(
        target_currency=rates.target_currency,
        total_revenue=revenue,
        total_labor_cost=labor,
        total_non_labor_cost=non_labor,
        total_cost=total_cost,
        total_profit=profit,
        overall_margin=overall_margin,
        total_expense_budget=expense_budget,
        overall_budget_used=budget_used,
        total_leakage=leakage,
        overall_leakage_percentage=leakage_percentage,
        overall_milestone_coverage=milestone_coverage,
        is_estimate=is_estimate,
        project_count=len(rows),
    )


def calculate_profitability(
    projects: List[Project],
    entries: List[TimeEntry],
    rates: RateTable,
    expenses: Optional[List[Expense]] = None,
    users: Optional[List[User]] = None,
    tasks: Optional[List[Task]] = None,
    sprints: Optional[List[Sprint]] = None,
    project_id: Optional[str] = None,
) -> ProfitabilityReport:
    """Calculate profitability for every project with time or expenses.

    Projects appear in the order their first time entry is seen, followed by
    projects that only have approved expenses. Time entries or expenses
    referencing unknown projects are left out.

    Args:
        projects: Known projects
        entries: Time entries
        rates: Rate table; its target currency is the reporting currency
        expenses: Project expenses (only approved ones count)
        users: Users, for profile rates and rate currencies
        tasks: Tasks, for detail titles and milestone coverage
        sprints: Sprints, for detail sprint names
        project_id: Restrict the calculation to one project

    Returns:
        ProfitabilityReport with per-project rows and portfolio totals

    Example:
        >>> project = Project(id="p1", name="Alpha", billing_model="fixed_price",
        ...     contract_amount=1000)
        >>> entry = TimeEntry(project_id="p1", user_email="a@x.com",
        ...     total_minutes=180, is_billable=True, status="approved", hourly_rate=50)
        >>> report = calculate_profitability([project], [entry], RateTable("INR"))
        >>> report.rows[0].total_labor_cost, report.rows[0].status
        (Decimal('150.00'), 'Healthy')
    """
    expenses = expenses or []
    users = users or []
    tasks = tasks or []
    sprints = sprints or []

    projects_by_id: Dict[str, Project] = {p.id: p for p in projects if p.id}
    users_by_email: Dict[str, User] = {u.email: u for u in users}
    tasks_by_id: Dict[str, Task] = {t.id: t for t in tasks if t.id}
    sprints_by_id: Dict[str, Sprint] = {s.id: s for s in sprints if s.id}

    expenses_by_project: "OrderedDict[str, List[Expense]]" = OrderedDict()
    for expense in expenses:
        if not expense.is_approved or not expense.project_id:
            continue
        if project_id is not None and expense.project_id != project_id:
            continue
        expenses_by_project.setdefault(expense.project_id, []).append(expense)

    groups: "OrderedDict[str, _ProjectAccumulator]" = OrderedDict()
    skipped = 0

    for entry in entries:
        if project_id is not None and entry.project_id != project_id:
            continue
        project = projects_by_id.get(entry.project_id) if entry.project_id else None
        if project is None:
            skipped += 1
            continue

        group = groups.get(project.id)
        if group is None:
            group = groups[project.id] = _ProjectAccumulator(project=project)

        minutes = entry.total_minutes
        group.logged_minutes += minutes

        key = (entry.user_email, entry.sprint_id, entry.task_id)
        detail = group.details.get(key)
        if detail is None:
            user = users_by_email.get(entry.user_email) if entry.user_email else None
            task = tasks_by_id.get(entry.task_id) if entry.task_id else None
            sprint = sprints_by_id.get(entry.sprint_id) if entry.sprint_id else None
            detail = group.details[key] = _DetailAccumulator(
                user_name=user.display_name if user else (entry.user_email or "Unknown"),
                user_email=entry.user_email,
                user_hourly_rate=user.hourly_rate if user else ZERO,
                user_currency=user.ctc_currency if user else "INR",
                task_id=task.id if task else None,
                task_title=task.title if task else GENERAL_TASK_LABEL,
                sprint_name=sprint.name if sprint else BACKLOG_SPRINT_LABEL,
            )
        detail.logged_minutes += minutes

        raw_rate = resolve_entry_rate(entry, detail.user_hourly_rate)
        conversion = rates.rate(detail.user_currency, project.currency)
        group.rates_are_estimate = group.rates_are_estimate or conversion.is_approximate
        effective_rate = raw_rate * conversion.rate

        if effective_rate > 0 and detail.last_snapshot_rate == 0:
            detail.last_snapshot_rate = effective_rate

        cost = Decimal(minutes) / Decimal("60") * effective_rate
        if entry.is_billable:
            detail.billable_minutes += minutes
            detail.billable_cost += cost
        group.logged_labor_cost += cost

        if entry.is_approved_billable:
            group.approved_billable_minutes += minutes
            detail.approved_billable_minutes += minutes
            detail.cost += cost
            group.labor_cost += cost

    if skipped:
        logger.info(f"Skipped {skipped} time entries without a known project")

    rows = [
        _build_row(group, expenses_by_project.get(pid, []), tasks, rates)
        for pid, group in groups.items()
    ]

    for pid, project_expenses in expenses_by_project.items():
        if pid in groups:
            continue
        project = projects_by_id.get(pid)
        if project is None:
            logger.info(f"Skipping expenses for unknown project {pid}")
            continue
        rows.append(_build_expense_only_row(project, project_expenses, tasks, rates))

    portfolio = summarize_portfolio(rows, tasks, rates)
    logger.debug(
        f"Calculated profitability for {len(rows)} projects "
        f"in {portfolio.target_currency}"
    )
    return ProfitabilityReport(rows=tuple(rows), portfolio=portfolio)
