"""Guided-practice session engine for timed meditation and mantra chanting."""

__version__ = "0.1.0"
