"""Tests for the OpenRouter client: payload, response parsing and failure reporting."""

import json

import httpx
import pytest

from app.services.llm_service import LLMService


def _completion(content: str) -> dict:
    return {"choices": [{"message": {"content": content}}], "usage": {"total_tokens": 42}}


@pytest.fixture
def make_service():
    """Build an enabled LLMService whose HTTP calls go to a handler."""

    def build(handler) -> LLMService:
        service = LLMService()
        service.enabled = True
        service.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return service

    return build


class TestClassifyRelevance:
    async def test_parses_eligible_ids(self, make_service) -> None:
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(json.loads(request.content))
            return httpx.Response(200, json=_completion('{"eligibleIds": ["apl", "css"]}'))

        service = make_service(handler)
        result = await service.classify_relevance("- Âge: 22 ans", [{"id": "apl", "name": "APL"}])

        assert result["success"] is True
        assert result["retained_ids"] == ["apl", "css"]
        payload = requests[0]
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["messages"][0]["role"] == "system"
        assert "Âge: 22 ans" in payload["messages"][1]["content"]

    async def test_accepts_fenced_json_and_snake_case(self, make_service) -> None:
        content = 'Voici le résultat:\n```json\n{"eligible_ids": ["apl"]}\n```'
        service = make_service(lambda request: httpx.Response(200, json=_completion(content)))

        result = await service.classify_relevance("profil", [])

        assert result["retained_ids"] == ["apl"]

    async def test_non_json_answer_is_a_failure(self, make_service) -> None:
        service = make_service(lambda request: httpx.Response(200, json=_completion("Je ne sais pas")))

        result = await service.classify_relevance("profil", [])

        assert result["success"] is False

    async def test_http_error_is_reported(self, make_service) -> None:
        service = make_service(lambda request: httpx.Response(429, text="rate limited"))

        result = await service.classify_relevance("profil", [])

        assert result["success"] is False
        assert result["status_code"] == 429

    async def test_network_error_is_reported(self, make_service) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(handler)
        result = await service.classify_relevance("profil", [])

        assert result["success"] is False

    async def test_disabled_service_makes_no_call(self) -> None:
        calls = []
        service = LLMService()
        service.enabled = False
        service.client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: calls.append(request) or httpx.Response(200))
        )

        result = await service.classify_relevance("profil", [])

        assert result["success"] is False
        assert calls == []


class TestTranslateTexts:
    async def test_translations_key(self, make_service) -> None:
        content = '{"translations": ["Help paying the rent"]}'
        service = make_service(lambda request: httpx.Response(200, json=_completion(content)))

        result = await service.translate_texts(["Aide au paiement du loyer"], "en")

        assert result == {"success": True, "translations": ["Help paying the rent"]}

    async def test_bare_array_and_results_key(self, make_service) -> None:
        service = make_service(lambda request: httpx.Response(200, json=_completion('["a", "b"]')))
        assert (await service.translate_texts(["x", "y"], "en"))["translations"] == ["a", "b"]

        service = make_service(lambda request: httpx.Response(200, json=_completion('{"results": ["c"]}')))
        assert (await service.translate_texts(["z"], "en"))["translations"] == ["c"]

    async def test_missing_list_is_a_failure(self, make_service) -> None:
        service = make_service(lambda request: httpx.Response(200, json=_completion('{"text": "hello"}')))

        result = await service.translate_texts(["bonjour"], "en")

        assert result["success"] is False
