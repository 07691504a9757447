"""
Tests for fund category and risk tier classification.
"""

import math
import pytest

from scoring.classification import (
    FundCategory,
    RiskTier,
    classify_fund,
    tier_from_type,
    tier_from_volatility,
    classify_risk_tier,
)


class TestClassifyFund:
    """Tests for classify_fund function."""

    @pytest.mark.parametrize("fund_type, category", [
        ('债券型-纯债', FundCategory.BOND),
        ('混合型-偏债', FundCategory.BOND),
        ('Fixed Income', FundCategory.BOND),
        ('股票型', FundCategory.EQUITY),
        ('指数型-股票', FundCategory.EQUITY),
        ('EQUITY', FundCategory.EQUITY),
        ('混合型-灵活', FundCategory.BALANCED),
        ('', FundCategory.BALANCED),
        (None, FundCategory.BALANCED),
    ])
    def test_categories(self, fund_type, category):
        assert classify_fund(fund_type) == category

    def test_enum_values_are_strings(self):
        assert FundCategory.BOND == 'bond'


class TestRiskTier:
    """Tests for risk tier resolution."""

    @pytest.mark.parametrize("fund_type, tier", [
        ('货币型', RiskTier.VERY_LOW),
        ('债券型-超短债', RiskTier.VERY_LOW),
        ('债券型-一级', RiskTier.LOW),
        ('债券型-中短债', RiskTier.LOW),
        ('债券型-二级', RiskTier.MEDIUM),
        ('FOF', RiskTier.MEDIUM),
        ('混合型-偏股混合', RiskTier.MEDIUM_HIGH),
        ('混合型-灵活配置', RiskTier.MEDIUM_HIGH),
        ('股票型', RiskTier.HIGH),
        ('QDII', RiskTier.MEDIUM),
    ])
    def test_tier_from_type(self, fund_type, tier):
        assert tier_from_type(fund_type) == tier

    @pytest.mark.parametrize("volatility, tier", [
        (0.4, RiskTier.VERY_LOW),
        (0.5, RiskTier.LOW),
        (2.9, RiskTier.LOW),
        (3.0, RiskTier.MEDIUM),
        (19.9, RiskTier.MEDIUM_HIGH),
        (20.0, RiskTier.HIGH),
        (math.nan, RiskTier.VERY_LOW),
    ])
    def test_tier_from_volatility(self, volatility, tier):
        assert tier_from_volatility(volatility) == tier

    def test_more_severe_tier_wins(self):
        """A bond fund swinging like an equity fund is treated as risky."""
        assert classify_risk_tier('债券型-二级', 15.0) == RiskTier.MEDIUM_HIGH
        assert classify_risk_tier('股票型', 1.0) == RiskTier.HIGH

    def test_severity_order(self):
        assert RiskTier.VERY_LOW.severity < RiskTier.LOW.severity < RiskTier.HIGH.severity
