"""Domain models and the cost-basis engine.

This package contains the in-memory (Pydantic) trade and money models, the
weighted-average cost book and the taxable trade results. They are
independent from persistence models so that business logic and testing can
evolve without DB coupling.
"""

__all__ = [
    "calculator",
    "cost_book",
    "money",
    "taxable_trade",
    "trade",
]
