#!/usr/bin/env python3
"""
Cash Risk — command-line front end.

Loads sales or bank rows from a CSV (or the built-in demo data), simulates the
daily cash balance with an AR(1) Monte Carlo, and prints the risk KPIs and
advisory.

Usage:
    cash-risk --csv sales.csv --horizon 60 --paths 3000 --seed 42
    cash-risk --demo sales --stress-sales -10 --dso 15 --fan-out fan.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

import pandas as pd

from core.config import SimulationParams, StressParams
from core.errors import InvalidParameter, SimulationTimeout
from data_prep.loader import load_flow_csv
from data_prep.samples import build_sample_cash, build_sample_sales
from data_prep.validators import validate_flow_rows
from engine.runner import run_cash_risk
from pm.aggregator import terminal_cash_summary
from pm.decisions import format_runway, generate_risk_report

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cash-risk",
        description="Cash-flow risk simulation - AR(1) Monte Carlo on daily net cash flow",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cash-risk --csv data/sales.csv --horizon 90 --paths 5000 --seed 7
  cash-risk --demo cash --start-cash 5000 --fan-out fan.csv
        """,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--csv", "-f", help="Path to a sales or bank-statement CSV")
    source.add_argument("--demo", choices=["sales", "cash"], help="Use a built-in demo dataset")

    parser.add_argument("--horizon", "-n", type=int, default=60, help="Horizon in days (default: 60)")
    parser.add_argument("--paths", "-p", type=int, default=3000, help="Simulated paths (default: 3000)")
    parser.add_argument("--start-cash", type=float, default=12000.0,
                        help="Cash balance before the first historical row (default: 12000)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    parser.add_argument("--timeout", type=float, default=None, help="Abort after this many seconds")

    parser.add_argument("--stress-sales", type=float, default=0.0, help="Inflow change in percent")
    parser.add_argument("--stress-costs", type=float, default=0.0, help="Outflow change in percent")
    parser.add_argument("--dso", type=int, default=0, help="Delay inflows by this many days")
    parser.add_argument("--densify", action="store_true",
                        help="Count calendar days without activity as zero-flow days")

    parser.add_argument("--alpha", type=float, default=0.95,
                        help="Confidence level of the per-path tail metrics (default: 0.95)")
    parser.add_argument("--fan-out", default=None, help="Write the p5/p50/p95 fan to this CSV")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


def _load_rows(args: argparse.Namespace) -> pd.DataFrame:
    if args.demo == "sales":
        return build_sample_sales()
    if args.demo == "cash":
        return build_sample_cash()
    logger.info("Loading rows from: %s", args.csv)
    return load_flow_csv(args.csv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    rows = _load_rows(args)
    check = validate_flow_rows(rows)
    for w in check.warnings:
        logger.warning(w)
    if not check.is_valid:
        print(check.summary(), file=sys.stderr)
        return 2
    logger.info("Loaded %d rows", len(rows))

    params = SimulationParams(
        horizon_days=args.horizon,
        n_paths=args.paths,
        starting_cash=args.start_cash,
        seed=args.seed,
        timeout_s=args.timeout,
    )
    try:
        stress = StressParams(sales_pct=args.stress_sales, costs_pct=args.stress_costs, dso_days=args.dso)
        result = run_cash_risk(rows, params, stress=stress, densify=args.densify)
    except (InvalidParameter, SimulationTimeout) as e:
        logger.error("%s", e)
        return 1

    hhi = result.concentration["hhi"] if result.concentration and result.concentration["hhi"] > 0 else None
    report = generate_risk_report(
        result.kpis,
        horizon_days=params.horizon_days,
        hhi=hhi,
        reference_cash=result.last_cash,
    )
    tail = result.tail_metrics(alpha=args.alpha)

    print(f"\nAR(1) fit on {len(result.daily)} days: {result.model!r}")
    print(f"Starting balance: {result.last_cash:,.2f}\n")
    print(report.to_dataframe().to_string(index=False))
    print(
        f"\nPer-path view @ {tail.alpha:.0%}: VaR {tail.var_loss:,.0f} • ES {tail.es_loss:,.0f} "
        f"• runway P5 {format_runway(tail.runway_days_p5)} d"
    )
    print("\n" + terminal_cash_summary(result.paths)["summary_table"].to_string(index=False))
    print("\nRecommendations:")
    for rec in report.recommendations:
        print(f"  [{rec.tone.upper()}] {rec.title}")
        print(f"      {rec.action}")

    if args.fan_out:
        result.fan.to_csv(args.fan_out, index=False)
        logger.info("Fan chart written to: %s", args.fan_out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
