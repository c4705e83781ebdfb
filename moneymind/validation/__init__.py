"""Data validation package."""

from moneymind.validation.validator import DataValidator

__all__ = ["DataValidator"]
