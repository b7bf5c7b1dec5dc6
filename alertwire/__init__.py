"""Alertwire: news alerts for prediction-market positions."""

__version__ = "0.1.0"
__author__ = "Alertwire Team"

__all__ = ["__version__", "__author__"]
