"""Tests for the remote extractors."""

import io
import json
from unittest.mock import MagicMock

import httpx
import pytest
from botocore.exceptions import ClientError

from loanchain.common.config import Settings
from loanchain.common.exceptions import ConfigurationError, RemoteExtractionFailed
from loanchain.extraction.remote import (
    MAX_PROMPT_CHARS,
    BedrockExtractor,
    GroqExtractor,
    build_extraction_prompt,
    create_remote_extractor,
    parse_model_json,
)

API_URL = "https://api.groq.test/openai/v1/chat/completions"

VALID_ANSWER = {
    "isValid": True,
    "metadata": {"borrower": "Acme Industrial Corp", "facilityAmount": 50000000},
    "covenants": [],
}


def chat_completion(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def groq_extractor(handler) -> GroqExtractor:
    return GroqExtractor(
        api_url=API_URL,
        model="llama-3.3-70b-versatile",
        transport=httpx.MockTransport(handler),
    )


class TestBuildExtractionPrompt:
    """Tests for prompt construction."""

    def test_text_truncated(self):
        prompt = build_extraction_prompt("A" * 20000)

        assert "A" * MAX_PROMPT_CHARS in prompt
        assert "A" * (MAX_PROMPT_CHARS + 1) not in prompt

    def test_schema_hint_included(self):
        prompt = build_extraction_prompt("Borrower: Acme")

        assert '"isValid": boolean' in prompt
        assert "Borrower: Acme..." in prompt


class TestParseModelJson:
    """Tests for decoding model answers."""

    def test_plain_json(self):
        assert parse_model_json('{"isValid": false}') == {"isValid": False}

    def test_fenced_json(self):
        content = 'Here you go:\n```json\n{"isValid": true}\n```'
        assert parse_model_json(content) == {"isValid": True}

    def test_bare_fence(self):
        assert parse_model_json('```\n{"isValid": true}\n```') == {"isValid": True}

    def test_malformed(self):
        with pytest.raises(RemoteExtractionFailed, match="malformed JSON") as exc_info:
            parse_model_json("not json at all", status_code=200)

        assert exc_info.value.status_code == 200
        assert exc_info.value.body == "not json at all"

    def test_not_an_object(self):
        with pytest.raises(RemoteExtractionFailed, match="not an object"):
            parse_model_json("[1, 2, 3]")


class TestGroqExtractor:
    """Tests for the Groq chat-completions client."""

    @pytest.mark.asyncio
    async def test_success(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json=chat_completion(json.dumps(VALID_ANSWER)))

        result = await groq_extractor(handler).extract("Borrower: Acme", api_key="gsk_test_key_123456")

        assert result == VALID_ANSWER
        request = captured["request"]
        assert request.method == "POST"
        assert str(request.url) == API_URL
        assert request.headers["Authorization"] == "Bearer gsk_test_key_123456"
        body = json.loads(request.content)
        assert body["model"] == "llama-3.3-70b-versatile"
        assert body["temperature"] == 0.1
        assert body["response_format"] == {"type": "json_object"}
        assert "Borrower: Acme" in body["messages"][0]["content"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 429, 500, 503])
    async def test_error_status_raises(self, status):
        """Test that a non-2xx answer is an error, not a defaulted result."""

        def handler(request):
            return httpx.Response(status, text="upstream said no")

        with pytest.raises(RemoteExtractionFailed) as exc_info:
            await groq_extractor(handler).extract("text", api_key="key")

        error = exc_info.value
        assert error.status_code == status
        assert error.body == "upstream said no"
        assert f"Groq API Error ({status})" in str(error)
        assert error.to_dict()["statusCode"] == status

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteExtractionFailed, match="request failed") as exc_info:
            await groq_extractor(handler).extract("text", api_key="key")

        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_unexpected_envelope(self):
        def handler(request):
            return httpx.Response(200, json={"id": "chatcmpl-1"})

        with pytest.raises(RemoteExtractionFailed, match="unexpected response"):
            await groq_extractor(handler).extract("text", api_key="key")

    @pytest.mark.asyncio
    async def test_malformed_content(self):
        def handler(request):
            return httpx.Response(200, json=chat_completion("I think this is a loan agreement."))

        with pytest.raises(RemoteExtractionFailed, match="malformed JSON"):
            await groq_extractor(handler).extract("text", api_key="key")

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(ConfigurationError, match="API key"):
            await groq_extractor(handler).extract("text", api_key="")


class TestBedrockExtractor:
    """Tests for the Bedrock runtime client."""

    def bedrock_client(self, answer_text: str) -> MagicMock:
        client = MagicMock()
        body = json.dumps({"content": [{"type": "text", "text": answer_text}]}).encode()
        client.invoke_model.return_value = {"body": io.BytesIO(body)}
        return client

    @pytest.mark.asyncio
    async def test_success(self):
        client = self.bedrock_client(json.dumps(VALID_ANSWER))
        extractor = BedrockExtractor(model_id="test-model", client=client)

        result = await extractor.extract("Borrower: Acme")

        assert result == VALID_ANSWER
        kwargs = client.invoke_model.call_args.kwargs
        assert kwargs["modelId"] == "test-model"
        request_body = json.loads(kwargs["body"])
        assert request_body["temperature"] == 0.1
        assert "Borrower: Acme" in request_body["messages"][0]["content"]

    @pytest.mark.asyncio
    async def test_invoke_failure(self):
        client = MagicMock()
        client.invoke_model.side_effect = RuntimeError("throttled")
        extractor = BedrockExtractor(model_id="test-model", client=client)

        with pytest.raises(RemoteExtractionFailed, match="Bedrock API call failed"):
            await extractor.extract("text")

    @pytest.mark.asyncio
    async def test_client_error(self):
        client = MagicMock()
        client.invoke_model.side_effect = ClientError(
            {
                "Error": {"Code": "ThrottlingException", "Message": "Too many requests"},
                "ResponseMetadata": {"HTTPStatusCode": 429},
            },
            "InvokeModel",
        )
        extractor = BedrockExtractor(model_id="test-model", client=client)

        with pytest.raises(RemoteExtractionFailed, match="ThrottlingException") as exc_info:
            await extractor.extract("text")

        assert exc_info.value.status_code == 429
        assert exc_info.value.body == "Too many requests"

    @pytest.mark.asyncio
    async def test_missing_content(self):
        client = MagicMock()
        client.invoke_model.return_value = {"body": io.BytesIO(b'{"content": []}')}
        extractor = BedrockExtractor(model_id="test-model", client=client)

        with pytest.raises(RemoteExtractionFailed, match="missing 'content'"):
            await extractor.extract("text")

    @pytest.mark.asyncio
    async def test_fenced_answer(self):
        client = self.bedrock_client('```json\n{"isValid": false, "reason": "Recipe"}\n```')
        extractor = BedrockExtractor(model_id="test-model", client=client)

        assert await extractor.extract("text") == {"isValid": False, "reason": "Recipe"}


class TestCreateRemoteExtractor:
    """Tests for provider selection."""

    def test_groq(self):
        extractor = create_remote_extractor(Settings(groq_model="test-model", request_timeout=5))

        assert isinstance(extractor, GroqExtractor)
        assert extractor.model == "test-model"
        assert extractor.timeout == 5

    def test_bedrock(self):
        extractor = create_remote_extractor(Settings(remote_provider="bedrock", bedrock_model_id="m"))

        assert isinstance(extractor, BedrockExtractor)
        assert extractor.requires_api_key is False

    def test_unknown(self):
        with pytest.raises(ConfigurationError, match="Unknown remote provider"):
            create_remote_extractor(Settings(remote_provider="openai"))
