"""DataFrame builders for tabular display of aggregation results.

Each builder turns a list of result records into a pandas DataFrame with
display column names, for printing in the CLI or writing to CSV.
"""

from typing import Any, Dict, List, Mapping

import pandas as pd

from project_insights.aggregators.resource_utilization import UtilizationSummary
from project_insights.calculators.health_calculator import ProjectHealth
from project_insights.calculators.profitability_calculator import ProfitabilityReport

PROFITABILITY_COLUMNS = [
    "Project",
    "Billing Model",
    "Currency",
    "Revenue",
    "Labor Cost",
    "Non-Labor Cost",
    "Total Cost",
    "Profit",
    "Margin %",
    "Status",
]

UTILIZATION_COLUMNS = [
    "User",
    "Active Tasks",
    "Estimated Hours",
    "Logged Hours",
    "Recent Hours",
    "Workload",
    "Completion %",
]

HEALTH_COLUMNS = [
    "Project",
    "Health Score",
    "Health",
    "Budget",
    "Tasks",
    "Completed",
    "Overdue",
]


def profitability_frame(report: ProfitabilityReport) -> pd.DataFrame:
    """One row per project with revenue, costs, profit and margin.

    Estimated non-labor costs are marked with a trailing "*".
    """
    rows: List[Dict[str, Any]] = []
    for row in report.rows:
        non_labor = f"{row.total_non_labor_cost}"
        if row.non_labor_cost_is_estimate:
            non_labor += "*"
        rows.append(
            {
                "Project": row.project_name,
                "Billing Model": row.billing_model or "-",
                "Currency": row.currency,
                "Revenue": float(row.revenue_amount),
                "Labor Cost": float(row.total_labor_cost),
                "Non-Labor Cost": non_labor,
                "Total Cost": float(row.total_cost),
                "Profit": float(row.profit),
                "Margin %": float(row.margin_percentage),
                "Status": row.status,
            }
        )
    return pd.DataFrame(rows, columns=PROFITABILITY_COLUMNS)


def utilization_frame(summary: UtilizationSummary) -> pd.DataFrame:
    rows = [
        {
            "User": user.full_name,
            "Active Tasks": user.active_tasks,
            "Estimated Hours": float(user.total_estimated_hours),
            "Logged Hours": user.total_logged_hours,
            "Recent Hours": user.recent_logged_hours,
            "Workload": user.workload_status,
            "Completion %": user.task_completion_rate,
        }
        for user in summary.users
    ]
    df = pd.DataFrame(rows, columns=UTILIZATION_COLUMNS)
    return df.sort_values("Estimated Hours", ascending=False, kind="stable").reset_index(
        drop=True
    )


def health_frame(results: List[ProjectHealth]) -> pd.DataFrame:
    rows = [
        {
            "Project": result.project_name,
            "Health Score": result.health_score,
            "Health": result.health_label,
            "Budget": result.budget_health.status,
            "Tasks": result.total_tasks,
            "Completed": result.completed_tasks,
            "Overdue": result.overdue_tasks,
        }
        for result in results
    ]
    return pd.DataFrame(rows, columns=HEALTH_COLUMNS)


def rows_frame(rows: List[Mapping[str, Any]]) -> pd.DataFrame:
    """Custom report rows as a DataFrame, columns in first-row key order."""
    if not rows:
        return pd.DataFrame()
    return pd.DataFrame(list(rows), columns=list(rows[0].keys()))
