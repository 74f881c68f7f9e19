"""
Budget Core - Analytics & Debt Projection Engine

The computational core of a personal budgeting application. It turns
raw transaction, budget and debt records into forecasts, category
budget comparisons, cash-flow summaries and debt payoff simulations.

DESIGN PRINCIPLES:
1. Every computation is a pure function of its input snapshot
2. Heavy analytics run off the interactive path
3. Failures are reported, never fatal to the host
4. Presentation metadata never crosses into the engine
5. Every step must be auditable
"""

__version__ = "1.0.0"
