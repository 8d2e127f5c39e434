"""
LLM service for OpenRouter API integration: relevance classification and translation
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


RELEVANCE_SYSTEM_PROMPT = """Tu es un expert en aides sociales françaises. Tu dois analyser si chaque aide est réellement pertinente pour le profil de l'utilisateur.

RÈGLES IMPORTANTES:
- Les aides pour enfants (allocations familiales, PAJE, CMG, ARS, AEEH) ne sont PAS pertinentes pour quelqu'un SANS enfants
- Les aides pour personnes âgées (ASPA, APA) ne sont PAS pertinentes pour les jeunes
- Les aides pour handicap (AAH, PCH, CMI) ne sont pertinentes QUE si la personne est handicapée
- Les aides pour demandeurs d'emploi ne sont PAS pertinentes pour les étudiants
- La Prime d'activité n'est PAS pertinente pour les étudiants sans emploi salarié significatif
- Les bourses étudiantes SONT pertinentes pour les étudiants
- Les aides au logement (APL, ALS) SONT pertinentes pour les locataires

Retourne UNIQUEMENT un JSON avec le format: { "eligibleIds": [liste des IDs des aides réellement pertinentes] }"""

TRANSLATION_SYSTEM_PROMPT = (
    "You are a translator. Translate the following French texts about government benefits "
    "in France to {language}. Keep the translations concise and clear. Return a JSON object "
    "of the form {{\"translations\": [translated strings, in the same order]}}."
)

LANGUAGE_NAMES = {
    "en": "English",
    "fr": "French",
}


class LLMService:
    """Service for OpenRouter API integration"""

    def __init__(self):
        self.api_key = settings.openrouter_api_key
        self.base_url = settings.openrouter_base_url
        self.model = settings.openrouter_model
        self.enabled = settings.llm_enabled

        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.llm_timeout_seconds),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            }
        )

    async def close(self):
        """Close HTTP client"""
        await self.client.aclose()

    async def classify_relevance(self, profile_summary: str, candidates: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Ask the model which candidates are truly relevant to a profile

        Args:
            profile_summary: Human readable summary of the user situation
            candidates: Compact candidate summaries (id, name, description, category)

        Returns:
            Dict with success flag and retained_ids, or error information
        """
        messages = [
            {"role": "system", "content": RELEVANCE_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": (
                    f"Profil utilisateur:\n{profile_summary}\n\n"
                    f"Liste des aides à filtrer:\n{json.dumps(candidates, ensure_ascii=False, indent=2)}\n\n"
                    "Retourne les IDs des aides réellement pertinentes pour ce profil."
                )
            }
        ]

        response = await self._chat_completion(messages, temperature=0.1)
        if not response["success"]:
            return response

        parsed = self._extract_json_from_response(response["content"])
        if not isinstance(parsed, dict):
            return {"success": False, "error": "Classifier response is not a JSON object"}

        retained = parsed.get("eligibleIds") or parsed.get("eligible_ids") or parsed.get("retained_ids") or []
        if not isinstance(retained, list):
            return {"success": False, "error": "Classifier response has no id list"}

        retained_ids = [str(value) for value in retained if isinstance(value, (str, int))]
        logger.info(f"Classifier retained {len(retained_ids)} of {len(candidates)} aides")
        return {
            "success": True,
            "retained_ids": retained_ids,
            "model_used": self.model,
            "tokens_used": response.get("tokens_used", 0)
        }

    async def translate_texts(self, texts: List[str], target_language: str) -> Dict[str, Any]:
        """
        Translate a batch of French texts

        Args:
            texts: Source texts
            target_language: ISO code of the target language

        Returns:
            Dict with success flag and translations (same length as texts, or shorter)
        """
        language_name = LANGUAGE_NAMES.get(target_language, target_language)
        messages = [
            {"role": "system", "content": TRANSLATION_SYSTEM_PROMPT.format(language=language_name)},
            {"role": "user", "content": json.dumps(texts, ensure_ascii=False)}
        ]

        response = await self._chat_completion(messages, temperature=0.3)
        if not response["success"]:
            return response

        parsed = self._extract_json_from_response(response["content"])
        if isinstance(parsed, dict):
            translations = parsed.get("translations") or parsed.get("results")
        else:
            translations = parsed

        if not isinstance(translations, list):
            return {"success": False, "error": "Translation response has no list of strings"}

        return {"success": True, "translations": translations}

    async def _chat_completion(self, messages: List[Dict[str, str]], temperature: float) -> Dict[str, Any]:
        """
        Send one chat completion request

        Returns:
            Dict with success flag and message content, or error information
        """
        if not self.enabled:
            return {"success": False, "error": "OpenRouter API key not configured"}

        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "response_format": {"type": "json_object"}
        }

        try:
            logger.info(f"Sending request to OpenRouter API with model: {self.model}")
            response = await self.client.post(f"{self.base_url}/chat/completions", json=payload)

            if response.status_code != 200:
                error_msg = f"OpenRouter API error: {response.status_code} - {response.text}"
                logger.error(error_msg)
                return {"success": False, "error": error_msg, "status_code": response.status_code}

            response_data = response.json()
            return {
                "success": True,
                "content": response_data["choices"][0]["message"]["content"] or "",
                "tokens_used": response_data.get("usage", {}).get("total_tokens", 0)
            }

        except httpx.TimeoutException:
            error_msg = "OpenRouter API request timed out"
            logger.error(error_msg)
            return {"success": False, "error": error_msg, "status_code": 408}

        except httpx.RequestError as e:
            error_msg = f"OpenRouter API request failed: {e}"
            logger.error(error_msg)
            return {"success": False, "error": error_msg, "status_code": 500}

        except (KeyError, IndexError, ValueError) as e:
            error_msg = f"Malformed OpenRouter API response: {e}"
            logger.error(error_msg)
            return {"success": False, "error": error_msg, "status_code": 502}

    def _extract_json_from_response(self, content: str) -> Optional[Any]:
        """
        Extract JSON from LLM response content

        Args:
            content: Raw response content from LLM

        Returns:
            Parsed JSON value or None if extraction fails
        """
        candidates = [content.strip()]

        # Pattern 1: ```json ... ``` or bare ``` ... ```
        block_match = re.search(r'```(?:json)?\s*(.*?)\s*```', content, re.DOTALL)
        if block_match:
            candidates.append(block_match.group(1))

        # Pattern 2: outermost object or array
        brace_match = re.search(r'(\{.*\}|\[.*\])', content, re.DOTALL)
        if brace_match:
            candidates.append(brace_match.group(1))

        for candidate in candidates:
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                continue

        logger.warning("No JSON content found in LLM response")
        return None


# Global LLM service instance
llm_service = LLMService()
