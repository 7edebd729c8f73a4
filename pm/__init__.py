"""
PM (risk reporting) outputs — percentile fan, KPIs, and advisory.
"""

from .aggregator import percentile_fan, terminal_cash_summary
from .metrics import RiskKPIs, PathTailMetrics, compute_risk_kpis, compute_path_tail_metrics
from .decisions import RiskReport, generate_risk_report

__all__ = [
    "percentile_fan",
    "terminal_cash_summary",
    "RiskKPIs",
    "PathTailMetrics",
    "compute_risk_kpis",
    "compute_path_tail_metrics",
    "RiskReport",
    "generate_risk_report",
]
