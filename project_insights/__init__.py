"""Project Insights: profitability, health and AI reporting for project portfolios."""

__version__ = "1.0.0"
