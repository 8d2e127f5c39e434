"""
Localizer: display formatting and batch translation of estimated aides
"""
import asyncio
import logging
from typing import List, Optional

from ..config import settings
from ..models.simulation import EstimatedAide
from ..utils.validators import normalize_text
from .llm_service import LLMService, llm_service

logger = logging.getLogger(__name__)

# Keys are folded category keys
CATEGORY_TRANSLATIONS = {
    "fr": {
        "housing": "Logement",
        "logement": "Logement",
        "family": "Famille",
        "famille": "Famille",
        "employment": "Emploi",
        "emploi": "Emploi",
        "social": "Social",
        "health": "Santé",
        "sante": "Santé",
        "education": "Éducation",
        "transport": "Transport",
    },
    "en": {
        "housing": "Housing",
        "logement": "Housing",
        "family": "Family",
        "famille": "Family",
        "employment": "Employment",
        "emploi": "Employment",
        "social": "Social",
        "health": "Health",
        "sante": "Health",
        "education": "Education",
        "transport": "Transport",
    },
}


class LocalizationService:
    """Formats aides for a display language and translates their descriptions"""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or llm_service

    def format_aide(self, aide: EstimatedAide, language: str) -> EstimatedAide:
        """Replace the category key with its display label for the language"""
        labels = CATEGORY_TRANSLATIONS.get(language, CATEGORY_TRANSLATIONS[settings.native_language])
        key = aide.category_key or normalize_text(aide.category) or "social"
        return aide.model_copy(update={"category": labels.get(key, aide.category)})

    async def localize(self, aides: List[EstimatedAide], language: str) -> List[EstimatedAide]:
        """
        Localize aides for display. Order and membership are never changed.

        Args:
            aides: Estimated aides in final order
            language: Requested display language

        Returns:
            Formatted aides, with the first batch of descriptions translated when possible
        """
        formatted = [self.format_aide(aide, language) for aide in aides]
        if language == settings.native_language or not formatted:
            return formatted

        batch = formatted[:settings.translation_batch_size]
        texts = [aide.description for aide in batch]
        if not any(texts):
            return formatted

        try:
            response = await asyncio.wait_for(
                self.llm.translate_texts(texts, language),
                settings.llm_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(f"Translation to {language} timed out, returning untranslated text")
            return formatted
        except Exception as e:
            logger.warning(f"Translation to {language} failed: {e}, returning untranslated text")
            return formatted

        if not response.get("success"):
            logger.warning(f"Translation to {language} failed: {response.get('error')}, returning untranslated text")
            return formatted

        translations = response.get("translations") or []
        localized = list(formatted)
        replaced = 0
        for index, aide in enumerate(batch):
            if index >= len(translations):
                break
            text = translations[index]
            if isinstance(text, str) and text.strip():
                localized[index] = aide.model_copy(update={"description": text.strip()})
                replaced += 1

        logger.info(f"Translated {replaced} of {len(formatted)} descriptions to {language}")
        return localized


# Global localization service instance
localization_service = LocalizationService()
