"""
Fund Scoring Module

Turns fund metrics into scores:
- Market-wide and risk-tier-relative scores (one scorer, two benchmark tables)
- Deep score with benchmark-relative and holdings analytics
- Index-fund timing score from valuation and technical signals
"""

__version__ = "0.0.1"
