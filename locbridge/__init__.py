"""Conversion engine between Apple and Android localization resources."""

__version__ = "0.1.0"
