import pytest

from app.core.exceptions import ProposalValidationError
from app.core.validation import is_truthy, validate_proposal_payload

VALID = {
    "objetivo": "Cobro de cartera",
    "valorTotalCOP": 1000000,
    "formaPago": "50/50",
    "razonSocial": "Acme SAS",
}


@pytest.mark.parametrize("value", [None, False, "", 0, 0.0, float("nan")])
def test_falsy_values(value):
    assert is_truthy(value) is False


@pytest.mark.parametrize("value", ["0", " ", 1, -5, 0.5, True, [], {}])
def test_truthy_values(value):
    assert is_truthy(value) is True


def test_valid_payload_builds_request():
    proposal = validate_proposal_payload(VALID)
    assert proposal.objetivo == "Cobro de cartera"
    assert proposal.valor_total_cop == 1000000
    assert proposal.forma_pago == "50/50"
    assert proposal.razon_social == "Acme SAS"


def test_forma_pago_is_optional():
    payload = {k: v for k, v in VALID.items() if k != "formaPago"}
    proposal = validate_proposal_payload(payload)
    assert proposal.forma_pago is None


@pytest.mark.parametrize("field", ["objetivo", "valorTotalCOP", "razonSocial"])
def test_missing_required_field(field):
    payload = {k: v for k, v in VALID.items() if k != field}
    with pytest.raises(ProposalValidationError) as exc:
        validate_proposal_payload(payload)
    assert exc.value.status_code == 400
    assert exc.value.message == "Faltan campos obligatorios."
    assert exc.value.missing_fields == [field]


@pytest.mark.parametrize("field,value", [("objetivo", ""), ("valorTotalCOP", 0), ("razonSocial", None)])
def test_falsy_required_field(field, value):
    with pytest.raises(ProposalValidationError):
        validate_proposal_payload({**VALID, field: value})


@pytest.mark.parametrize("payload", [None, [], "texto", 42])
def test_non_object_payload_is_treated_as_empty(payload):
    with pytest.raises(ProposalValidationError) as exc:
        validate_proposal_payload(payload)
    assert exc.value.missing_fields == ["objetivo", "valorTotalCOP", "razonSocial"]


def test_values_are_not_coerced():
    proposal = validate_proposal_payload({**VALID, "valorTotalCOP": "1.000.000"})
    assert proposal.valor_total_cop == "1.000.000"
