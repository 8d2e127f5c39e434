"""
Utility functions for the Aides Simulator
"""

from .validators import (
    fold_accents,
    normalize_text,
    normalize_region_slug,
    generate_record_id,
    validate_language,
    validate_situation_data,
    extract_text_snippet
)

__all__ = [
    "fold_accents",
    "normalize_text",
    "normalize_region_slug",
    "generate_record_id",
    "validate_language",
    "validate_situation_data",
    "extract_text_snippet"
]
