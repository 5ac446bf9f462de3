"""Remote model-based extraction.

The remote collaborator reads an excerpt of the agreement and answers with a
single JSON object in the ExtractionResult shape. Two providers speak the same
prompt:

- groq: OpenAI-compatible chat completions over HTTPS with a bearer key
- bedrock: AWS Bedrock runtime invoke_model with IAM credentials

Any transport failure, non-2xx status or undecodable answer raises
RemoteExtractionFailed. There is no retry: one failure ends the attempt.
"""

import asyncio
import json
from typing import Any, Optional

import httpx
from botocore.exceptions import ClientError

from ..common.aws_clients import get_bedrock_client
from ..common.config import Settings
from ..common.exceptions import ConfigurationError, RemoteExtractionFailed
from ..common.safe_log import safe_log

MAX_PROMPT_CHARS = 15000
MAX_ERROR_BODY_CHARS = 2000

EXTRACTION_PROMPT = """
You are a specialized financial verification AI. Your job is to analyze the text of a document and determine if it is a valid Loan Agreement or Credit Agreement.

If it IS a valid agreement, extract the structured data below.
If it is NOT (e.g., a recipe, a novel, random text), set "isValid" to false and provide a reason.

Required Data if Valid:
1. Borrower Name
2. Total Facility Amount (estimate if strictly not found, look for "Commitment" or "Total")
3. Interest Rate (e.g., "SOFR + 3.5%")
4. Maturity Date
5. Covenants: Extract 2-3 key financial covenants (Leverage Ratio, DSCR, etc.)
6. Flowchart: Create a logical flow of funds/process as nodes and edges.
   - Nodes should behave like: Borrower -> Payment -> Agent -> Lenders -> Check Covenants.
   - Assign colors: Borrower (#6366f1), Payment (#22c55e), Agent (#3b82f6), Covenants (#ef4444).

Input Text (truncated):
{document_text}...

Respond ONLY in valid JSON format matching this schema:
{{
  "isValid": boolean,
  "reason": string (if invalid),
  "metadata": {{
    "borrower": string,
    "facilityAmount": number (raw number),
    "interestType": string,
    "maturityDate": string (YYYY-MM-DD)
  }},
  "covenants": [
    {{ "id": string, "name": string, "type": "Financial", "threshold": number, "currentValue": number (mock a realistic current value), "status": "healthy" | "warning" | "breach" }}
  ],
  "flowchart": {{
    "nodes": [ {{ "id": "1", "label": "Borrower", "color": "#6366f1" }} ],
    "edges": [ {{ "id": "e1-2", "source": "1", "target": "2" }} ]
  }}
}}
"""


def build_extraction_prompt(text: str) -> str:
    """Instruction, the first 15,000 characters of the text and the schema hint."""
    return EXTRACTION_PROMPT.format(document_text=text[:MAX_PROMPT_CHARS])


def parse_model_json(content: str, status_code: Optional[int] = None) -> dict[str, Any]:
    """Decode the model's JSON answer, tolerating a markdown code fence.

    Raises:
        RemoteExtractionFailed: if the answer is not a JSON object
    """
    if "```json" in content:
        content = content.split("```json")[1].split("```")[0]
    elif "```" in content:
        content = content.split("```")[1].split("```")[0]

    try:
        parsed = json.loads(content.strip())
    except json.JSONDecodeError as e:
        raise RemoteExtractionFailed(
            f"Remote extractor returned malformed JSON: {str(e)}",
            status_code=status_code,
            body=content[:MAX_ERROR_BODY_CHARS],
            cause=e,
        ) from e

    if not isinstance(parsed, dict):
        raise RemoteExtractionFailed(
            "Remote extractor returned JSON that is not an object",
            status_code=status_code,
            body=content[:MAX_ERROR_BODY_CHARS],
        )
    return parsed


class GroqExtractor:
    """Chat-completions client for the Groq API.

    Args:
        api_url: Full chat completions endpoint URL
        model: Model name
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)
    """

    provider = "groq"
    requires_api_key = True

    def __init__(
        self,
        api_url: str,
        model: str,
        timeout: float = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.model = model
        self.timeout = timeout
        self.transport = transport

    def build_payload(self, text: str) -> dict[str, Any]:
        return {
            "messages": [{"role": "user", "content": build_extraction_prompt(text)}],
            "model": self.model,
            "temperature": 0.1,
            "response_format": {"type": "json_object"},
        }

    async def extract(self, text: str, api_key: Optional[str] = None) -> dict[str, Any]:
        """POST the document excerpt and return the decoded ExtractionResult JSON."""
        if not api_key:
            raise ConfigurationError("Remote extraction requires an API key")

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        safe_log(
            "Calling remote extractor",
            provider=self.provider,
            url=self.api_url,
            model=self.model,
            chars=min(len(text), MAX_PROMPT_CHARS),
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.api_url, headers=headers, json=self.build_payload(text))
        except httpx.HTTPError as e:
            safe_log("Remote extraction request failed", error=str(e))
            raise RemoteExtractionFailed(f"Groq API request failed: {str(e)}", cause=e) from e

        status_code = response.status_code
        if not response.is_success:
            body = response.text
            safe_log("Remote extractor returned error status", status=status_code, body=body[:500])
            raise RemoteExtractionFailed(
                f"Groq API Error ({status_code}): {body}",
                status_code=status_code,
                body=body[:MAX_ERROR_BODY_CHARS],
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise RemoteExtractionFailed(
                f"Groq API returned an unexpected response: {str(e)}",
                status_code=status_code,
                body=response.text[:MAX_ERROR_BODY_CHARS],
                cause=e,
            ) from e

        safe_log("Remote extractor responded", status=status_code, chars=len(content or ""))
        return parse_model_json(content or "", status_code=status_code)


class BedrockExtractor:
    """Same prompt through the Bedrock runtime, authenticated by IAM.

    Args:
        model_id: Bedrock model identifier
        client: Optional bedrock-runtime client (defaults to the cached one)
    """

    provider = "bedrock"
    requires_api_key = False

    def __init__(self, model_id: str, client: Any = None):
        self.model_id = model_id
        self.client = client

    def _invoke(self, text: str) -> dict[str, Any]:
        client = self.client or get_bedrock_client()
        safe_log(
            "Calling remote extractor",
            provider=self.provider,
            model=self.model_id,
            chars=min(len(text), MAX_PROMPT_CHARS),
        )

        try:
            response = client.invoke_model(
                modelId=self.model_id,
                contentType="application/json",
                accept="application/json",
                body=json.dumps(
                    {
                        "anthropic_version": "bedrock-2023-05-31",
                        "max_tokens": 4096,
                        "temperature": 0.1,
                        "messages": [{"role": "user", "content": build_extraction_prompt(text)}],
                    }
                ),
            )
            response_body_raw = response["body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            error_msg = e.response.get("Error", {}).get("Message", str(e))
            safe_log("Bedrock ClientError", code=error_code, error=error_msg)
            raise RemoteExtractionFailed(
                f"Bedrock API Error ({error_code}): {error_msg}",
                status_code=e.response.get("ResponseMetadata", {}).get("HTTPStatusCode"),
                body=error_msg[:MAX_ERROR_BODY_CHARS],
                cause=e,
            ) from e
        except Exception as e:
            safe_log("Bedrock invoke_model failed", error=str(e))
            raise RemoteExtractionFailed(
                f"Bedrock API call failed: {str(e)}",
                body=str(e)[:MAX_ERROR_BODY_CHARS],
                cause=e,
            ) from e

        try:
            response_body = json.loads(response_body_raw)
        except (json.JSONDecodeError, TypeError) as e:
            raise RemoteExtractionFailed(
                f"Failed to parse Bedrock response JSON: {str(e)}",
                body=str(response_body_raw)[:MAX_ERROR_BODY_CHARS],
                cause=e,
            ) from e

        if "error" in response_body:
            error = response_body.get("error")
            message = error.get("message", str(error)) if isinstance(error, dict) else str(error)
            raise RemoteExtractionFailed(f"Bedrock error: {message}", body=message[:MAX_ERROR_BODY_CHARS])

        if not response_body.get("content"):
            raise RemoteExtractionFailed(
                "Bedrock response missing 'content' field",
                body=json.dumps(response_body)[:MAX_ERROR_BODY_CHARS],
            )

        content = response_body["content"][0].get("text", "")
        safe_log("Remote extractor responded", provider=self.provider, chars=len(content))
        return parse_model_json(content)

    async def extract(self, text: str, api_key: Optional[str] = None) -> dict[str, Any]:
        """Invoke the model in a worker thread; ``api_key`` is unused."""
        return await asyncio.to_thread(self._invoke, text)


def create_remote_extractor(settings: Settings):
    """Build the remote extractor selected by ``settings.remote_provider``."""
    if settings.remote_provider == "groq":
        return GroqExtractor(
            api_url=settings.groq_api_url,
            model=settings.groq_model,
            timeout=settings.request_timeout,
        )
    if settings.remote_provider == "bedrock":
        return BedrockExtractor(model_id=settings.bedrock_model_id)
    raise ConfigurationError(f"Unknown remote provider: {settings.remote_provider}")
