"""Service and domain-model layer for cohorts and concept answers."""

__version__ = "0.1.0"
