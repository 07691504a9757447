"""
Analysis Engine Module

Calculates fund metrics from NAV, benchmark and holdings data:
- Returns (period, annualized, rolling, calendar-month)
- Volatility, Sharpe and Sortino ratios
- Maximum drawdown and Calmar ratio
- Benchmark-relative alpha/beta, IR, Treynor, VaR/CVaR
- Holdings concentration (top-N, industry HHI)
"""

__version__ = "0.0.1"
