"""
Scoring Backtest Module

Re-derives historical scores without lookahead and compares them with
realized forward returns:
- Point-in-time metrics and forward returns
- Pearson/Spearman correlation and quintile buckets
- Investment-strategy backtests (SIP, holding periods, drawdown buying)
"""

__version__ = "0.0.1"
