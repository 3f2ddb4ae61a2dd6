"""Wallet models, key derivation and validation for invoices and payments."""

__version__ = "0.1.0"