"""Aptos DeFi portfolio aggregation and swap-routing engine."""

__version__ = "0.1.0"
