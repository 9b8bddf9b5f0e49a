from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from collections.abc import Awaitable
from collections.abc import Callable
from uuid import uuid4

from openai import AsyncOpenAI

from app.core.config import Settings
from app.core.exceptions import DEFAULT_PROVIDER_ERROR_MESSAGE
from app.core.exceptions import ClientDisconnectedError
from app.core.exceptions import GatewayError
from app.core.exceptions import GenerationTimeoutError
from app.core.exceptions import ProviderError
from app.models.proposal_models import GenerationConfig
from app.models.proposal_models import GenerationFailure
from app.models.proposal_models import GenerationResult
from app.models.proposal_models import GenerationSuccess
from app.models.proposal_models import ProposalRequest
from app.models.proposal_models import StreamFailed
from app.services.aggregator import aggregate_fragments
from app.services.llm import open_generation_stream

# Configure module logger
logger = logging.getLogger(__name__)

DisconnectCheck = Callable[[], Awaitable[bool]]


class ProposalService:
    """Turns a validated proposal into the complete generated document.

    One instance serves every request; it only holds read-only collaborators,
    so concurrent calls never share mutable state.
    """

    def __init__(self, settings: Settings, client: AsyncOpenAI, generation_config: GenerationConfig):
        self.settings = settings
        self.client = client
        self.generation_config = generation_config

    async def generate(
        self,
        proposal: ProposalRequest,
        request_id: str | None = None,
        is_disconnected: DisconnectCheck | None = None,
    ) -> GenerationResult:
        """Composes the outbound message, streams the generation and aggregates it.

        Provider failures never escape: they come back as GenerationFailure
        and nothing is retried.

        Args:
            proposal: The validated proposal fields.
            request_id: Correlation id for log lines; generated when omitted.
            is_disconnected: Awaitable check telling whether the caller went away.
                When it reports True the provider stream is abandoned.

        Returns:
            GenerationSuccess with the full text, or GenerationFailure carrying
            the error to report.
        """
        request_id = request_id or str(uuid4())
        user_message = proposal.to_outbound_message()
        logger.debug("[%s] Outbound message composed, length: %d chars", request_id, len(user_message))

        cancel_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.generation_timeout
        try:
            opened = await asyncio.wait_for(
                open_generation_stream(
                    self.client,
                    self.generation_config,
                    user_message,
                    request_id,
                    cancel_event,
                ),
                timeout=self.settings.generation_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "[%s] Opening the generation stream exceeded %.1fs",
                request_id,
                self.settings.generation_timeout,
            )
            return GenerationFailure(error=GenerationTimeoutError())
        if isinstance(opened, StreamFailed):
            return GenerationFailure(error=opened.error)

        try:
            remaining = max(deadline - loop.time(), 0.0)
            text = await self._drain(opened.fragments, request_id, cancel_event, is_disconnected, remaining)
        except GatewayError as e:
            logger.error("[%s] Generation failed: %s", request_id, e.message)
            return GenerationFailure(error=e)
        except Exception as e:
            logger.exception("[%s] Unexpected error while consuming generation stream", request_id)
            return GenerationFailure(error=ProviderError(str(e) or DEFAULT_PROVIDER_ERROR_MESSAGE))

        logger.info("[%s] Proposal generated, length: %d chars", request_id, len(text))
        return GenerationSuccess(text=text)

    async def _drain(
        self,
        fragments: AsyncIterator[str | None],
        request_id: str,
        cancel_event: asyncio.Event,
        is_disconnected: DisconnectCheck | None,
        timeout: float,
    ) -> str:
        """Aggregates the stream, bounded by what is left of the generation timeout and the caller's connection."""
        aggregation = asyncio.ensure_future(aggregate_fragments(fragments))
        waiters: set[asyncio.Future] = {aggregation}
        watcher: asyncio.Future | None = None
        if is_disconnected is not None:
            watcher = asyncio.ensure_future(self._wait_for_disconnect(is_disconnected))
            waiters.add(watcher)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
            if aggregation in done:
                return aggregation.result()
            if watcher is not None and watcher in done:
                watcher.result()  # surfaces a failing check instead of reporting a disconnect
                logger.info("[%s] Client disconnected, abandoning generation", request_id)
                raise ClientDisconnectedError()
            logger.warning(
                "[%s] Generation exceeded %.1fs, abandoning stream",
                request_id,
                self.settings.generation_timeout,
            )
            raise GenerationTimeoutError()
        finally:
            if watcher is not None:
                watcher.cancel()
            if not aggregation.done():
                cancel_event.set()
                aggregation.cancel()
                await asyncio.gather(aggregation, return_exceptions=True)

    async def _wait_for_disconnect(self, is_disconnected: DisconnectCheck) -> None:
        while not await is_disconnected():
            await asyncio.sleep(self.settings.disconnect_poll_interval)
