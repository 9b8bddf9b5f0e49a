import asyncio
import logging
import pathlib
from collections.abc import AsyncIterator
from typing import Any

import httpx
import jinja2
from openai import AsyncOpenAI
from openai import AsyncStream
from openai import OpenAIError
from openai.types.chat import ChatCompletionChunk

from app.core.config import Settings
from app.core.exceptions import DEFAULT_PROVIDER_ERROR_MESSAGE
from app.core.exceptions import ConfigurationError
from app.core.exceptions import ProviderError
from app.models.proposal_models import GenerationConfig
from app.models.proposal_models import StreamFailed
from app.models.proposal_models import StreamOpened
from app.models.proposal_models import StreamResult

# Configure module logger
logger = logging.getLogger(__name__)


# --- Prompt templates ---
PROMPT_DIR = pathlib.Path(__file__).parent / "prompt_templates"
SYSTEM_INSTRUCTION_TEMPLATE = "system_instruction.jinja2"

# Values injected into the proposal-drafting instruction
SYSTEM_INSTRUCTION_CONTEXT: dict[str, Any] = {
    "max_title_chars": 48,
    "max_bullets": 10,
    "default_payment_terms": "50% anticipo, 50% contra entrega",
}


def render_system_instruction(prompt_dir: pathlib.Path = PROMPT_DIR) -> str:
    """Renders the fixed proposal-drafting instruction from its Jinja2 template."""
    env = jinja2.Environment(loader=jinja2.FileSystemLoader(prompt_dir), keep_trailing_newline=True)
    try:
        template = env.get_template(SYSTEM_INSTRUCTION_TEMPLATE)
    except jinja2.TemplateNotFound:
        logger.error("Template not found: %s in %s", SYSTEM_INSTRUCTION_TEMPLATE, prompt_dir)
        raise ConfigurationError(f"Template '{SYSTEM_INSTRUCTION_TEMPLATE}' not found.") from None
    return template.render(**SYSTEM_INSTRUCTION_CONTEXT)


def build_generation_config(settings: Settings) -> GenerationConfig:
    """Builds the process-wide generation parameters once, at startup."""
    return GenerationConfig(
        model_id=settings.model_id,
        system_instruction=render_system_instruction(),
    )


# ---------------------------------------------------------------
# Provider client
# ---------------------------------------------------------------
def build_client(settings: Settings) -> AsyncOpenAI:
    """Creates the async client for the provider's OpenAI-compatible endpoint.

    SDK-level retries are disabled: a provider failure is reported to the caller as-is.
    """
    timeout_config = httpx.Timeout(
        settings.LLM_CONNECT_TIMEOUT,
        read=settings.LLM_READ_TIMEOUT,
    )
    return AsyncOpenAI(
        base_url=settings.llm_base_url,
        api_key=settings.gemini_api_key,
        timeout=timeout_config,
        max_retries=0,
    )


def _error_message(exc: BaseException) -> str:
    """The exception's own message, or the default one when it has none."""
    return str(exc) or DEFAULT_PROVIDER_ERROR_MESSAGE


def _chunk_text(chunk: ChatCompletionChunk) -> str | None:
    # Usage-only and keep-alive chunks carry no choices
    if not chunk.choices:
        return None
    delta = chunk.choices[0].delta
    if delta is None:
        return None
    return delta.content


async def stream_fragments(
    stream: AsyncStream[ChatCompletionChunk],
    request_id: str,
    cancel_event: asyncio.Event | None = None,
) -> AsyncIterator[str | None]:
    """Yields the text of each streamed chunk, in delivery order.

    Stops pulling as soon as ``cancel_event`` is set. The provider stream is
    closed on every exit path.
    """
    try:
        async for chunk in stream:
            if cancel_event is not None and cancel_event.is_set():
                logger.info("[%s] Generation cancelled, abandoning provider stream", request_id)
                break
            yield _chunk_text(chunk)
    except OpenAIError as e:
        logger.error("[%s] Provider error while streaming: %s", request_id, str(e))
        raise ProviderError(_error_message(e)) from e
    finally:
        await stream.close()


async def open_generation_stream(
    client: AsyncOpenAI,
    config: GenerationConfig,
    user_message: str,
    request_id: str,
    cancel_event: asyncio.Event | None = None,
) -> StreamResult:
    """Starts a streaming generation for one outbound message.

    The system instruction travels as the system message; ``user_message`` is
    the only user turn.

    Returns:
        StreamOpened with the lazy fragment iterator, or StreamFailed when the
        provider rejects the call or cannot be reached.
    """
    logger.info("[%s] Opening generation stream with model: %s", request_id, config.model_id)
    try:
        stream = await client.chat.completions.create(
            model=config.model_id,
            messages=[
                {"role": "system", "content": config.system_instruction},
                {"role": "user", "content": user_message},
            ],
            temperature=config.temperature,
            top_p=config.top_p,
            max_tokens=config.max_output_tokens,
            stream=True,
            # Gemini's OpenAI-compatible API reads provider options from a nested extra_body
            extra_body={"extra_body": {"google": {"thinking_config": {"thinking_budget": config.thinking_budget}}}},
        )
    except OpenAIError as e:
        logger.error("[%s] Provider rejected generation request: %s", request_id, str(e), exc_info=True)
        return StreamFailed(error=ProviderError(_error_message(e)))
    except Exception as e:
        logger.exception("[%s] Unexpected error opening generation stream", request_id)
        return StreamFailed(error=ProviderError(_error_message(e)))

    return StreamOpened(fragments=stream_fragments(stream, request_id, cancel_event))
