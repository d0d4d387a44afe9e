"""Single-symbol price ticker: polls a book ticker, applies commission, stores and serves prices."""

__version__ = "0.1.0"
