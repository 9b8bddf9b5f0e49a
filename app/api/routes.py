import json
import logging
from typing import Any
from uuid import uuid4

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Request

from app.core.config import Settings
from app.core.exceptions import PayloadTooLargeError
from app.core.security import get_settings
from app.core.security import verify_api_key
from app.core.validation import validate_proposal_payload
from app.models.proposal_models import ErrorEnvelope
from app.models.proposal_models import GenerationFailure
from app.models.proposal_models import ProposalResponse
from app.services.proposal_service import ProposalService

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

JSON_MEDIA_TYPE = "application/json"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Invalid JSON constant: {name}")


def get_proposal_service(request: Request) -> ProposalService:
    """Returns the service instance built at startup."""
    return request.app.state.proposal_service


async def read_json_body(request: Request, max_bytes: int, request_id: str) -> Any:
    """Reads the request body up to ``max_bytes`` and decodes it as JSON.

    Only application/json bodies are decoded. Returns None for any other
    content type and for an empty or undecodable body, which validation then
    rejects as missing fields. NaN and Infinity literals count as undecodable.

    Raises:
        PayloadTooLargeError: If the declared or actual size exceeds the limit.
    """
    media_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if media_type != JSON_MEDIA_TYPE:
        logger.info("[%s] Ignoring body with content type %r", request_id, media_type or None)
        return None

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        logger.warning("[%s] Rejected body of declared size %s bytes", request_id, declared)
        raise PayloadTooLargeError()

    body = bytearray()
    async for chunk in request.stream():
        body += chunk
        if len(body) > max_bytes:
            logger.warning("[%s] Rejected body exceeding %d bytes", request_id, max_bytes)
            raise PayloadTooLargeError()

    if not body:
        return None
    try:
        return json.loads(body, parse_constant=_reject_constant)
    except ValueError:
        logger.info("[%s] Request body is not valid JSON", request_id)
        return None


@router.post(
    "/propuesta",
    dependencies=[Depends(verify_api_key)],
    response_model=ProposalResponse,
    responses={
        400: {"model": ErrorEnvelope},
        401: {"model": ErrorEnvelope},
        413: {"model": ErrorEnvelope},
        500: {"model": ErrorEnvelope},
        504: {"model": ErrorEnvelope},
    },
    summary="Generate a legal proposal",
    tags=["Propuesta"],
)
async def generate_proposal(
    request: Request,
    settings: Settings = Depends(get_settings),
    service: ProposalService = Depends(get_proposal_service),
) -> ProposalResponse:
    """
    Drafts a commercial legal proposal from the four business fields and
    returns the complete document once the model has finished streaming it.
    """
    request_id = str(uuid4())
    logger.info("[%s] Proposal request received", request_id)

    payload = await read_json_body(request, settings.max_body_bytes, request_id)
    proposal = validate_proposal_payload(payload)

    result = await service.generate(proposal, request_id=request_id, is_disconnected=request.is_disconnected)
    if isinstance(result, GenerationFailure):
        raise result.error
    return ProposalResponse(text=result.text)
