"""
Portval App - Simulated Portfolio Valuation Engine

Continuously re-prices a portfolio of equities and European options under a
simulated market. A background market bus evolves stock prices every tick and
publishes immutable snapshots; portfolio valuators price every position against
each snapshot and hand structured reports to delivery sinks.
"""

__version__ = "0.1.0"
__author__ = "Portval Team"
