"""Read-only multi-chain balance and transaction monitor."""

__version__ = "0.1.0"
