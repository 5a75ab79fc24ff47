"""Adaptive UI probing and outcome verification for end-to-end browser tests."""

__version__ = "0.1.0"
