"""Hooksmith - webhook-driven self-updating agent."""

__version__ = "0.1.0"
