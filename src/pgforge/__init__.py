"""pgforge - PostgreSQL developer utilities and migration regeneration."""

__version__ = "0.1.0"

SUPPORTED_BACKENDS = ["postgresql"]
