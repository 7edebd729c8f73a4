"""
Risk advisory — tone flags and canned recommendations from the KPIs.

Translates the KPI record into answers a business owner can act on:
  Q1: "Will I run out of cash?"        → runway P5 and overdraft probability
  Q2: "How bad is the bad case?"       → CFaR / ES gap below the median plan
  Q3: "Do I depend on a few clients?"  → customer HHI
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from core.config import (
    HHI_OK,
    HHI_WARN,
    OVERDRAFT_ALERT_PROB,
    OVERDRAFT_OK_PROB,
    OVERDRAFT_WARN_PROB,
    RUNWAY_OK_DAYS,
    RUNWAY_WARN_DAYS,
)

from .metrics import RiskKPIs

# CFaR is flagged once the p5 gap exceeds this share of the reference balance
CFAR_ALERT_RATIO = 0.10

MAX_RECOMMENDATIONS = 3


@dataclass
class Recommendation:
    code: str
    tone: str  # "ok" | "warn" | "risk"
    title: str
    problem: str
    cause: str
    action: str
    expected_effect: str
    impact_pct: int
    effort_hours: int
    confidence_pct: int


@dataclass
class RiskReport:
    """Structured advisory output."""
    horizon_days: int
    kpis: RiskKPIs
    hhi: Optional[float]

    runway_tone: str
    overdraft_tone: str
    concentration_tone: Optional[str]

    recommendations: List[Recommendation] = field(default_factory=list)

    @property
    def flags(self) -> List[str]:
        return [r.code for r in self.recommendations if r.tone != "ok"]

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a display-friendly table."""
        k = self.kpis
        rows = [
            {"Metric": "Horizon", "Value": f"{self.horizon_days}", "Unit": "days"},
            {"Metric": "Runway P5", "Value": format_runway(k.runway_days_p5), "Unit": "days"},
            {"Metric": "P(Overdraft)", "Value": f"{k.probability_overdraft:.1%}", "Unit": ""},
            {"Metric": "CFaR (p5 - p50, worst day)", "Value": f"{k.cfar:,.0f}", "Unit": "cash"},
            {"Metric": "Expected Shortfall (mean p5 - p50)", "Value": f"{k.expected_shortfall:,.0f}", "Unit": "cash"},
        ]
        if self.hhi is not None:
            rows.append({"Metric": "Customer HHI", "Value": f"{self.hhi:.2f}", "Unit": ""})
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags), "Unit": ""})
        return pd.DataFrame(rows)


def format_runway(days: float) -> str:
    return "∞" if not math.isfinite(days) else f"{int(round(days))}"


def runway_tone(days: float) -> str:
    if not math.isfinite(days) or days >= RUNWAY_OK_DAYS:
        return "ok"
    return "warn" if days >= RUNWAY_WARN_DAYS else "bad"


def overdraft_tone(prob: float) -> str:
    if prob <= OVERDRAFT_OK_PROB:
        return "ok"
    return "warn" if prob <= OVERDRAFT_WARN_PROB else "bad"


def concentration_tone(hhi: float) -> str:
    if hhi <= HHI_OK:
        return "ok"
    return "warn" if hhi <= HHI_WARN else "bad"


def generate_risk_report(
    kpis: RiskKPIs,
    *,
    horizon_days: int,
    hhi: Optional[float] = None,
    reference_cash: Optional[float] = None,
) -> RiskReport:
    """
    Build the advisory report for one simulation run.

    Parameters
    ----------
    kpis : RiskKPIs
        Output of pm.metrics.compute_risk_kpis()
    horizon_days : int
        Simulated horizon, quoted in the texts
    hhi : float, optional
        Customer concentration index (data_prep.daily_flows.customer_concentration)
    reference_cash : float, optional
        Balance the CFaR gap is compared against. Without it, any gap below
        the median is flagged.
    """
    recs: List[Recommendation] = []

    if kpis.runway_days_p5 < RUNWAY_WARN_DAYS or kpis.probability_overdraft > OVERDRAFT_ALERT_PROB:
        recs.append(Recommendation(
            code="TIGHT_RUNWAY",
            tone="warn",
            title=(
                f"Tight runway (P5 {format_runway(kpis.runway_days_p5)} d) — "
                f"P(overdraft) {kpis.probability_overdraft:.0%}"
            ),
            problem=f"Cash position is fragile over {horizon_days} days.",
            cause="Late customer receipts (DSO) and a squeezed net margin.",
            action="Offer a 1% early-payment discount to the 5 largest customers for payment "
                   "within 15 days, with reminders at D+3 and D+10.",
            expected_effect="Runway +15 to 25 days, overdraft probability -5 to -12 points.",
            impact_pct=90,
            effort_hours=4,
            confidence_pct=80,
        ))

    if reference_cash is not None and abs(reference_cash) > 0:
        cfar_alert = -kpis.cfar > CFAR_ALERT_RATIO * abs(reference_cash)
    else:
        cfar_alert = kpis.cfar < 0
    if cfar_alert:
        gap = -kpis.cfar
        recs.append(Recommendation(
            code="CASH_AT_RISK",
            tone="risk",
            title=(
                f"Cash at risk over {horizon_days} d = {gap:,.0f} "
                f"• ES = {-kpis.expected_shortfall:,.0f}"
            ),
            problem="The pessimistic path falls well below the median plan.",
            cause="Volatile daily flows and eroding margin on non-key items.",
            action="Targeted +3 to 4% price increase on non-key items plus a stable-margin "
                   "entry bundle.",
            expected_effect=f"CFaR reduction of 20 to 40% (~{0.2 * gap:,.0f} to {0.4 * gap:,.0f}).",
            impact_pct=75,
            effort_hours=6,
            confidence_pct=72,
        ))

    if hhi is not None and hhi > HHI_WARN:
        recs.append(Recommendation(
            code="CONCENTRATION",
            tone="warn",
            title=f"High customer concentration — HHI {hhi:.2f}",
            problem="Revenue depends on a handful of key accounts.",
            cause=f"Revenue share concentrated above {HHI_WARN:.2f} HHI.",
            action="Direct-channel campaign (5% code) aimed at 50 recurring buyers.",
            expected_effect="Direct revenue +8 to 15% over 60 days, HHI towards 0.15 to 0.18.",
            impact_pct=68,
            effort_hours=8,
            confidence_pct=70,
        ))

    if not recs:
        recs.append(Recommendation(
            code="HEALTHY",
            tone="ok",
            title="Risk profile under control",
            problem="Nothing urgent.",
            cause="Comfortable runway, low overdraft probability, moderate concentration.",
            action="Set up weekly alerts and back-test CFaR exceptions.",
            expected_effect="Preserves margin and steering time.",
            impact_pct=50,
            effort_hours=2,
            confidence_pct=85,
        ))

    return RiskReport(
        horizon_days=int(horizon_days),
        kpis=kpis,
        hhi=hhi,
        runway_tone=runway_tone(kpis.runway_days_p5),
        overdraft_tone=overdraft_tone(kpis.probability_overdraft),
        concentration_tone=concentration_tone(hhi) if hhi is not None else None,
        recommendations=recs[:MAX_RECOMMENDATIONS],
    )
