"""XIRR — annualised internal rate of return over irregular cash flows.

Solves  Σ amount_i / (1 + r) ** ((date_i - date_0).days / 365) = 0  for r.

Newton-Raphson from several seeds first; if none lands on a valid root, scan a
fixed grid of rates for a sign change and finish with Brent's method. Both
stages are iteration-capped, so the solver always terminates. Any failure
yields None, never an exception.
"""

import logging
import warnings
from collections.abc import Sequence

import numpy as np
from scipy.optimize import brentq, newton

from src.pf_portfolio.domain.cashflows import CashFlow

logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365.0

# Rates are fractions: -0.99 is -99%, 100.0 is +10,000%
MIN_RATE = -0.99
MAX_RATE = 100.0

_NEWTON_SEEDS: tuple[float, ...] = (0.1, 0.01, 0.5, -0.5, 0.2, -0.2, 1.0, -0.9, 5.0)
_BRACKET_GRID: tuple[float, ...] = (
    -0.99, -0.95, -0.9, -0.75, -0.5, -0.25, 0.0, 0.1, 0.25,
    0.5, 1.0, 2.0, 5.0, 10.0, 25.0, 50.0, 100.0,
)
_MIN_FLOW = 0.01


def xirr(flows: Sequence[CashFlow], max_iterations: int = 100) -> float | None:
    """Return XIRR as a percentage (10.0 means 10%), or None when unavailable.

    Unavailable means: fewer than two non-zero flows, all flows on one date,
    all flows of one sign, or no root found in [MIN_RATE, MAX_RATE].
    """
    usable = sorted((f for f in flows if abs(f.amount) >= _MIN_FLOW), key=lambda f: f.date)
    if len(usable) < 2:
        return None
    if usable[0].date == usable[-1].date:
        return None
    if all(f.amount > 0 for f in usable) or all(f.amount < 0 for f in usable):
        return None

    start = usable[0].date
    times = np.array([(f.date - start).days / DAYS_PER_YEAR for f in usable])
    amounts = np.array([f.amount for f in usable])
    tolerance = 1e-7 * float(np.max(np.abs(amounts)))

    def npv(rate: float) -> float:
        with np.errstate(all="ignore"):
            return float(np.sum(amounts / np.power(1.0 + rate, times)))

    def d_npv(rate: float) -> float:
        with np.errstate(all="ignore"):
            return float(np.sum(-times * amounts / np.power(1.0 + rate, times + 1.0)))

    def is_root(rate: float) -> bool:
        if not np.isfinite(rate) or not MIN_RATE < rate <= MAX_RATE:
            return False
        value = npv(rate)
        return bool(np.isfinite(value)) and abs(value) <= tolerance

    for seed in _NEWTON_SEEDS:
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("ignore", RuntimeWarning)
                rate = float(newton(npv, seed, fprime=d_npv, maxiter=max_iterations, tol=1e-10))
        except (RuntimeError, OverflowError, ZeroDivisionError):
            continue
        if is_root(rate):
            return rate * 100.0

    values = [npv(r) for r in _BRACKET_GRID]
    for (lo, f_lo), (hi, f_hi) in zip(
        zip(_BRACKET_GRID, values), zip(_BRACKET_GRID[1:], values[1:])
    ):
        if not (np.isfinite(f_lo) and np.isfinite(f_hi)) or f_lo * f_hi > 0:
            continue
        try:
            rate = float(brentq(npv, lo, hi, xtol=1e-12, maxiter=max_iterations))
        except (RuntimeError, ValueError):
            continue
        if is_root(rate):
            return rate * 100.0

    logger.debug("XIRR did not converge for %d cash flows", len(usable))
    return None
