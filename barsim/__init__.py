"""barsim: bar-by-bar strategy simulation and performance scoring.

A strategy is a function of what it can see. The simulator makes sure that is
all it can see.
"""

from __future__ import annotations

__all__ = ["__version__", "TRADING_DAYS_PER_YEAR"]

__version__ = "1.0.0"

# Annualization constant. Fixed regardless of bar resolution.
TRADING_DAYS_PER_YEAR = 252
