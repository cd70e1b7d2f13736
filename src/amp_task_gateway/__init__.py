"""Amp Task Gateway - Local REST proxy for Amp tasks."""

__version__ = "0.1.0"
