"""Guardrail constructs with secure defaults."""

from .rds import SecureDatabaseInstance

__all__ = ["SecureDatabaseInstance"]
