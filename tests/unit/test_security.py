import pytest

from app.core.exceptions import AuthorizationError
from app.core.security import is_authorized, verify_api_key


def test_is_authorized_exact_match():
    assert is_authorized("secret", "secret") is True


@pytest.mark.parametrize(
    "credential",
    [None, "", "wrong", "Secret", "secret ", " secret"],
)
def test_is_authorized_rejects(credential):
    assert is_authorized(credential, "secret") is False


def test_is_authorized_without_configured_secret():
    assert is_authorized("anything", None) is False
    assert is_authorized("", "") is False


@pytest.mark.asyncio
async def test_verify_api_key_success(settings):
    result = await verify_api_key(settings.internal_api_key, settings)
    assert result is True


@pytest.mark.asyncio
async def test_verify_api_key_failure(settings):
    with pytest.raises(AuthorizationError) as exc:
        await verify_api_key("wrong_key", settings)
    assert exc.value.status_code == 401
    assert exc.value.message == "Unauthorized"


@pytest.mark.asyncio
async def test_verify_api_key_missing_header(settings):
    with pytest.raises(AuthorizationError):
        await verify_api_key(None, settings)
