"""swapguard - Sandwich protection for AMM pools by escrow and randomized delay."""

__version__ = "0.1.0"
