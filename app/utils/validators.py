"""
Utility functions for text normalization and request validation
"""
import re
import unicodedata
import uuid
from typing import List, Optional

from ..config import settings


def fold_accents(text: str) -> str:
    """
    Fold accented characters to their base form

    Args:
        text: Text possibly containing diacritics ("Île-de-France")

    Returns:
        Text without combining marks ("Ile-de-France")
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(text: Optional[str]) -> str:
    """
    Lowercase, accent-folded, single-spaced text for keyword matching.
    Typographic apostrophes are turned into plain ones.
    """
    if not text:
        return ""
    folded = fold_accents(text).lower().replace('’', "'").replace('‘', "'")
    return re.sub(r'\s+', ' ', folded).strip()


def normalize_region_slug(region: Optional[str]) -> str:
    """
    Normalize a geography code to the catalog's canonical slug form

    Args:
        region: Raw geography code, e.g. "-Île de France" or "ILE-DE-FRANCE"

    Returns:
        Canonical slug, e.g. "ile-de-france" (empty string for missing input)
    """
    if not region:
        return ""

    slug = region.strip()

    # Strip leading separator characters
    slug = slug.lstrip('-_/. ')

    slug = fold_accents(slug).lower()

    # Whitespace runs become a single separator
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'-{2,}', '-', slug)

    return slug.strip('-')


def generate_record_id() -> str:
    """Generate an identifier for persisted simulations and bookmarks"""
    return uuid.uuid4().hex


def validate_language(language: str) -> bool:
    """
    Check that a display language is one the service can render

    Args:
        language: Two-letter language code

    Returns:
        True if supported, False otherwise
    """
    if not language:
        return False
    return language.strip().lower() in settings.get_supported_languages_list()


def validate_situation_data(situation_data: dict) -> List[str]:
    """
    Cross-field checks on a user situation that the model itself does not enforce

    Args:
        situation_data: Dictionary containing the situation answers

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    age = situation_data.get('age')
    years = situation_data.get('years_in_country')
    if age is not None and years is not None:
        try:
            if float(years) > float(age):
                errors.append("Years in country cannot exceed age")
        except (ValueError, TypeError):
            errors.append("Years in country must be a valid number")

    children = situation_data.get('number_of_children')
    if children is not None:
        try:
            if int(children) > 20:
                errors.append("Number of children must be 20 or fewer")
        except (ValueError, TypeError):
            errors.append("Number of children must be a valid number")

    if not normalize_region_slug(situation_data.get('region')):
        errors.append("Missing required field: region")

    return errors


def extract_text_snippet(text: str, max_length: int = 200) -> str:
    """
    Extract a snippet of text for prompts and previews

    Args:
        text: Full text
        max_length: Maximum length of snippet

    Returns:
        Text snippet
    """
    if not text:
        return ""

    if len(text) <= max_length:
        return text

    # Try to break at word boundary
    snippet = text[:max_length]
    last_space = snippet.rfind(' ')

    if last_space > max_length * 0.8:
        snippet = snippet[:last_space]

    return snippet + "..."
