"""
Validation package for spiregen.

Public API:
    - ValidationResult, ValidationIssue, Severity: Core result types
    - ValidationStage: Stage enumeration
    - ValidationError: Exception raised by ValidationResult.raise_if_failed()
    - validate_catalog(): Catalog checks against the socket configuration
    - validate_layout(): Structural checks for a finished layout graph
"""

from .core import (
    Severity,
    ValidationStage,
    ValidationIssue,
    ValidationResult,
    ValidationError,
)
from .layout_checks import validate_catalog, validate_layout

__all__ = [
    # Core types
    'Severity',
    'ValidationStage',
    'ValidationIssue',
    'ValidationResult',
    'ValidationError',
    # Checks
    'validate_catalog',
    'validate_layout',
]
