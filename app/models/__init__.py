"""
Models module - internal data structures shared by services and routes.
"""

from app.models.application import (
    StatusField,
    Stage,
    StatusFlags,
    derive_stage,
    normalize_status_field,
    parse_stage,
)

__all__ = [
    "StatusField",
    "Stage",
    "StatusFlags",
    "derive_stage",
    "normalize_status_field",
    "parse_stage",
]
