"""Regression harness core: patch, run and validate simulation examples."""

__version__ = "0.1.0"
