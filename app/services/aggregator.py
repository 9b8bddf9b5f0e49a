import logging
from collections.abc import AsyncIterable

logger = logging.getLogger(__name__)


async def aggregate_fragments(fragments: AsyncIterable[str | None]) -> str:
    """Drains the fragment stream and concatenates the non-empty pieces in arrival order.

    Errors raised while pulling the next fragment are propagated unchanged.
    """
    text = ""
    count = 0
    async for fragment in fragments:
        if fragment:
            text += fragment
            count += 1
    logger.debug("Aggregated %d fragments into %d chars", count, len(text))
    return text
