"""
Cash simulation engine — AR(1) Monte Carlo paths and the end-to-end runner.
"""

from .runner import SimulationResult, simulate, run_cash_risk

__all__ = ["SimulationResult", "simulate", "run_cash_risk"]
