"""
Utility helpers used by the importer.

This subpackage exposes the error hierarchy and the structured JSON Lines
reporting functions.
"""

from .errors import ERRORS, ImporterError, report_error, report_ok

__all__ = ["ERRORS", "ImporterError", "report_error", "report_ok"]
