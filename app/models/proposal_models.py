import math
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import Field

from app.core.exceptions import GatewayError

FIELD_DELIMITER = " | "


def _stringify(value: Any) -> str:
    """Renders a payload value the way the calling application prints it.

    Covers strings, numbers, booleans, lists and objects. Integral floats drop
    the ``.0`` below 1e21, lists join their items with commas (null items
    render empty) and objects render as ``[object Object]``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    if isinstance(value, list):
        return ",".join("" if item is None else _stringify(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    return str(value)


class ProposalRequest(BaseModel):
    """The four business fields of a proposal, as received from the caller.

    Values are kept verbatim; only presence is checked (see app.core.validation).
    """

    objetivo: Any
    valor_total_cop: Any = Field(alias="valorTotalCOP")
    forma_pago: Any = Field(default=None, alias="formaPago")
    razon_social: Any = Field(alias="razonSocial")

    model_config = {"populate_by_name": True, "frozen": True}

    def to_outbound_message(self) -> str:
        """Joins the fields in fixed order with the fixed delimiter.

        Values are not escaped: a field containing the delimiter shifts the
        field boundaries the model sees.
        """
        forma_pago = "" if self.forma_pago is None else self.forma_pago
        return FIELD_DELIMITER.join(
            _stringify(value)
            for value in (self.objetivo, self.valor_total_cop, forma_pago, self.razon_social)
        )


class GenerationConfig(BaseModel):
    """Fixed generation parameters shared by every request."""

    model_id: str
    temperature: float = 0.3
    top_p: float = 0.3
    max_output_tokens: int = 3000
    thinking_budget: int = 0
    system_instruction: str

    model_config = {"frozen": True, "protected_namespaces": ()}


@dataclass(frozen=True)
class StreamOpened:
    """The provider accepted the request; fragments arrive lazily and only once."""

    fragments: AsyncIterator[str | None]


@dataclass(frozen=True)
class StreamFailed:
    """The provider call could not be started."""

    error: GatewayError


@dataclass(frozen=True)
class GenerationSuccess:
    text: str


@dataclass(frozen=True)
class GenerationFailure:
    error: GatewayError


StreamResult = StreamOpened | StreamFailed
GenerationResult = GenerationSuccess | GenerationFailure


class ProposalResponse(BaseModel):
    text: str


class ErrorEnvelope(BaseModel):
    error: str


class HealthResponse(BaseModel):
    ok: bool = True
