"""NextCut: walk-in barber queue engine."""

__version__ = "0.1.0"
