"""Presence checks for the inbound proposal payload."""

import logging
import math
from typing import Any

from app.core.exceptions import ProposalValidationError
from app.models.proposal_models import ProposalRequest

logger = logging.getLogger(__name__)

# Wire names of the fields that must be present and truthy
REQUIRED_FIELDS: tuple[str, ...] = ("objetivo", "valorTotalCOP", "razonSocial")


def is_truthy(value: Any) -> bool:
    """Truthiness as the calling application understands it.

    None, False, "", 0 and NaN are falsy. Empty lists and objects count as
    present.
    """
    if value is None or value is False:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float)):
        return value != 0 and not math.isnan(value)
    return True


def validate_proposal_payload(payload: Any) -> ProposalRequest:
    """Builds a ProposalRequest or raises ProposalValidationError.

    Anything that is not a JSON object is treated as an empty payload. No
    normalization or coercion is applied to the values.
    """
    if not isinstance(payload, dict):
        payload = {}

    missing = [name for name in REQUIRED_FIELDS if not is_truthy(payload.get(name))]
    if missing:
        logger.info("Proposal payload rejected, missing fields: %s", ", ".join(missing))
        raise ProposalValidationError(missing_fields=missing)

    return ProposalRequest(
        objetivo=payload["objetivo"],
        valorTotalCOP=payload["valorTotalCOP"],
        formaPago=payload.get("formaPago"),
        razonSocial=payload["razonSocial"],
    )
