# Lightweight package init; avoid heavy imports.
__version__ = "0.1.0"
