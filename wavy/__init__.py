"""Wavy Services backend: public site API, back-office and CRA portal."""

__version__ = "0.1.0"
