"""Calculators for profitability, health, risk and timeline metrics.

All functions are pure: identical inputs give identical results, and every
date-sensitive calculation takes ``today`` explicitly.
"""

from project_insights.calculators.currency import ConversionResult, RateTable
from project_insights.calculators.health_calculator import (
    BudgetHealth,
    HealthSummary,
    ProjectHealth,
    assess_projects,
    calculate_budget_health,
    calculate_health_score,
    health_label,
    summarize_health,
)
from project_insights.calculators.profitability_calculator import (
    PortfolioProfitability,
    ProfitabilityDetail,
    ProfitabilityReport,
    ProjectProfitability,
    calculate_profitability,
    classify_margin,
    revenue_for_project,
)
from project_insights.calculators.risk_calculator import (
    RiskAssessment,
    RiskFactor,
    RiskItem,
    assess_risk,
    risk_level,
)
from project_insights.calculators.timeline_calculator import (
    TimelinePrediction,
    predict_timeline,
)

__all__ = [
    "ConversionResult",
    "RateTable",
    "BudgetHealth",
    "HealthSummary",
    "ProjectHealth",
    "assess_projects",
    "calculate_budget_health",
    "calculate_health_score",
    "health_label",
    "summarize_health",
    "PortfolioProfitability",
    "ProfitabilityDetail",
    "ProfitabilityReport",
    "ProjectProfitability",
    "calculate_profitability",
    "classify_margin",
    "revenue_for_project",
    "RiskAssessment",
    "RiskFactor",
    "RiskItem",
    "assess_risk",
    "risk_level",
    "TimelinePrediction",
    "predict_timeline",
]
