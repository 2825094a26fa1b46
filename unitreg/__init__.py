"""unitreg — an ownership-aware registry of weighted, labelled units."""

__version__ = "0.1.0"
