# ABOUTME: Single entry point for Gemini calls on Vertex AI
# ABOUTME: Plain text or schema-validated JSON, with a one-shot JSON recovery after grounded calls

import json
import logging
import re
from typing import Any, Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from .exceptions import MalformedResponseError, SchemaValidationError
from .models import GenerativeRequestConfig, ResponseType

logger = logging.getLogger(__name__)

# Recovery calls allowed after a grounded response failed to parse
MAX_RECOVERY_ATTEMPTS = 1

HARM_CATEGORIES = (
    "HARM_CATEGORY_DANGEROUS_CONTENT",
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
)

_FENCE_PATTERN = re.compile(r"^\s*```[\w-]*[ \t]*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove a markdown code fence (```json, ```html, ```) wrapping the whole text."""
    if text is None:
        return ""
    match = _FENCE_PATTERN.match(text)
    return match.group(1).strip() if match else text.strip()


def schema_to_json(schema: Any) -> str:
    return json.dumps(TypeAdapter(schema).json_schema(), indent=2)


class GeminiTransport(Protocol):
    """Sends one generateContent request and returns the generated text."""

    def generate(self, prompt: str, config: GenerativeRequestConfig) -> str: ...


class VertexGeminiTransport:
    """
    google-genai transport against Vertex AI.

    One client is created per (project, location) pair and reused.
    """

    def __init__(self, credentials=None):
        self.credentials = credentials
        self._clients: dict[tuple[str, str], Any] = {}

    def _client(self, project_id: str, location: str):
        key = (project_id, location)
        if key not in self._clients:
            from google import genai

            self._clients[key] = genai.Client(
                vertexai=True,
                project=project_id,
                location=location,
                credentials=self.credentials,
            )
            logger.info(f"Vertex AI client initialized (project={project_id}, location={location})")
        return self._clients[key]

    def build_config(self, config: GenerativeRequestConfig):
        from google.genai import types

        return types.GenerateContentConfig(
            temperature=config.temperature,
            top_p=config.top_p,
            max_output_tokens=config.max_output_tokens,
            response_mime_type=config.response_type.value,
            response_schema=config.response_schema if config.is_json else None,
            tools=(
                [types.Tool(google_search=types.GoogleSearch())]
                if config.enable_retrieval_grounding
                else None
            ),
            safety_settings=[
                types.SafetySetting(category=category, threshold="BLOCK_ONLY_HIGH")
                for category in HARM_CATEGORIES
            ],
            thinking_config=(
                types.ThinkingConfig(thinking_budget=config.thinking_budget)
                if config.thinking_budget is not None
                else None
            ),
        )

    def generate(self, prompt: str, config: GenerativeRequestConfig) -> str:
        client = self._client(config.project_id, config.location)
        response = client.models.generate_content(
            model=config.model_id,
            contents=prompt,
            config=self.build_config(config),
        )

        candidates = getattr(response, "candidates", None) or []
        if not candidates or not candidates[0].content or not candidates[0].content.parts:
            raise MalformedResponseError("Empty response from Gemini", raw_text=str(response))
        return candidates[0].content.parts[0].text or ""


def build_grounded_request(
    prompt: str, config: GenerativeRequestConfig
) -> tuple[str, GenerativeRequestConfig]:
    """
    Downgrade a grounded JSON request to plain text.

    Search grounding cannot be combined with a JSON response MIME type or
    schema, so the output format is requested in the prompt instead.
    """
    instructions = (
        "\n\nImportant:\n"
        " - Output only the raw JSON string. Do not include markdown formatting "
        "(e.g. ```json) or any other text."
    )
    if config.response_schema is not None:
        instructions += (
            "\n - Adhere to the following JSON Schema definition: "
            f"{schema_to_json(config.response_schema)}"
        )
    text_config = config.model_copy(
        update={"response_type": ResponseType.TEXT, "response_schema": None}
    )
    return prompt + instructions, text_config


def build_recovery_request(
    response_text: str, config: GenerativeRequestConfig
) -> tuple[str, GenerativeRequestConfig]:
    """Ungrounded JSON request extracting the payload from a previous answer."""
    recovery_config = config.model_copy(
        update={"response_type": ResponseType.JSON, "enable_retrieval_grounding": False}
    )
    return f"Extract valid JSON from this text response:\n\n{response_text}", recovery_config


def parse_json_response(text: str, schema: Optional[Any] = None) -> Any:
    """
    Parse a JSON answer and validate it against `schema`.

    Raises:
        MalformedResponseError: if the text is not JSON
        SchemaValidationError: if the payload violates the schema
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}", raw_text=text) from e

    if schema is None:
        return data

    try:
        return TypeAdapter(schema).validate_python(data)
    except ValidationError as e:
        violations = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in e.errors()
        ]
        logger.error(f"JSON validation failed: {violations}")
        raise SchemaValidationError(
            f"JSON validation failed: {'; '.join(violations)}", violations
        ) from e


class GenerativeModelGateway:
    """
    Invokes a Gemini model and returns text or validated structured data.

    - TEXT responses are returned with any wrapping code fence removed.
    - JSON responses are parsed and validated against `config.response_schema`.
    - Grounded JSON requests are sent as grounded plain text; if that answer
      is not parseable JSON, one ungrounded recovery call extracts the JSON.

    Usage:
        gateway = GenerativeModelGateway()
        clusters = gateway.generate(prompt, GenerativeRequestConfig(
            model_id="gemini-2.5-pro",
            project_id="my-project",
            response_type=ResponseType.JSON,
            response_schema=list[ClusterProposal],
        ))
    """

    def __init__(self, transport: Optional[GeminiTransport] = None):
        self.transport = transport or VertexGeminiTransport()

    def generate(self, prompt: str, config: GenerativeRequestConfig) -> Any:
        if not config.is_json:
            logger.debug(prompt)
            return strip_code_fences(self.transport.generate(prompt, config))

        grounded = config.enable_retrieval_grounding
        if grounded:
            request_prompt, request_config = build_grounded_request(prompt, config)
        else:
            request_prompt, request_config = prompt, config

        for attempt in range(MAX_RECOVERY_ATTEMPTS + 1):
            logger.debug(request_prompt)
            text = self.transport.generate(request_prompt, request_config)
            try:
                return parse_json_response(text, config.response_schema)
            except MalformedResponseError as e:
                logger.error(f"Error while parsing JSON. Text:\n{text}")
                if not grounded or not text:
                    raise
                if attempt == MAX_RECOVERY_ATTEMPTS:
                    raise MalformedResponseError(
                        "Could not recover valid JSON from grounded response", raw_text=text
                    ) from e
                logger.warning(
                    "Grounded response did not provide valid JSON, "
                    "re-generating in JSON response mode"
                )
                request_prompt, request_config = build_recovery_request(text, config)
