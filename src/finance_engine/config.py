"""Shared constants and defaults.

All tuneable defaults live here so there is a single place to adjust them.
"""
from __future__ import annotations

from typing import Literal

# ── Type aliases ──────────────────────────────────────────────────────────────

Compounding = Literal["annually", "semiannually", "quarterly", "monthly", "daily"]

# ── Compounding frequencies (periods per year) ────────────────────────────────

COMPOUNDING_FREQUENCIES: dict[str, int] = {
    "annually": 1,
    "semiannually": 2,
    "quarterly": 4,
    "monthly": 12,
    "daily": 365,
}

PERIODS_PER_YEAR: int = 12

# ── Rate solver ───────────────────────────────────────────────────────────────

SOLVER_MAX_ITERATIONS: int = 30
SOLVER_TOLERANCE: float = 1e-6

# Two rates closer than this are treated as equal (PV degenerate case, r == 0).
RATE_EPSILON: float = 1e-12

# ── CLI defaults (mirror the calculator form defaults) ────────────────────────

DEFAULT_PRINCIPAL: float = 250_000.0
DEFAULT_ANNUAL_RATE_PCT: float = 6.5
DEFAULT_TERM_YEARS: int = 30
DEFAULT_COMPOUNDING: Compounding = "monthly"
DEFAULT_CURRENCY: str = "USD"
