import ssl
from datetime import timedelta
from urllib.parse import parse_qs

import httpx
import pytest
import respx
from httpx import Response

from discord_oauth.clients import (
    AccessTokenExchangeRequest,
    ClientCredentials,
    DecodeFailure,
    Err,
    HttpStatusError,
    NetworkFailure,
    OAuthConfig,
    Ok,
    ProviderError,
    Scope,
    TlsFailure,
    TokenExchanger,
)
from discord_oauth.clients.types import DISCORD_TOKEN_URL

REDIRECT = "http://localhost:8000/callback"


@pytest.fixture
def exchanger() -> TokenExchanger:
    config = OAuthConfig(credentials=ClientCredentials(123, "shh-secret"), redirect_uri=REDIRECT)
    return TokenExchanger(config, timeout=5.0)


@pytest.mark.asyncio
@respx.mock
async def test_exchange_success(exchanger):
    route = respx.post(DISCORD_TOKEN_URL).mock(
        return_value=Response(200, json={"access_token": "abc", "token_type": "bearer"})
    )

    result = await exchanger.exchange_code("the-code")

    assert route.call_count == 1
    assert isinstance(result, Ok)
    assert result.value.access_token == "abc"
    assert result.value.token_type == "bearer"
    assert result.value.scope == frozenset()
    assert result.value.expires_in is None


@pytest.mark.asyncio
@respx.mock
async def test_exchange_posts_form_encoded_grant(exchanger):
    route = respx.post(DISCORD_TOKEN_URL).mock(return_value=Response(200, json={"access_token": "abc"}))

    await exchanger.exchange_code("the-code")

    request = route.calls.last.request
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    form = parse_qs(request.content.decode())
    assert form == {
        "client_id": ["123"],
        "client_secret": ["shh-secret"],
        "grant_type": ["authorization_code"],
        "code": ["the-code"],
        "redirect_uri": [REDIRECT],
    }


@pytest.mark.asyncio
@respx.mock
async def test_exchange_decodes_full_discord_payload(exchanger):
    respx.post(DISCORD_TOKEN_URL).mock(
        return_value=Response(
            200,
            json={
                "access_token": "abc",
                "token_type": "Bearer",
                "expires_in": 604800,
                "refresh_token": "refresh-me",
                "scope": "identify email",
            },
        )
    )

    result = await exchanger.exchange(
        AccessTokenExchangeRequest(client_id=123, client_secret="shh-secret", code="c", redirect_uri=REDIRECT)
    )

    assert result.is_ok
    token = result.value
    assert token.scope == {Scope.IDENTIFY, Scope.EMAIL}
    assert token.expires_in == timedelta(days=7)
    assert token.refresh_token == "refresh-me"


@pytest.mark.asyncio
@respx.mock
async def test_provider_error_body(exchanger):
    respx.post(DISCORD_TOKEN_URL).mock(return_value=Response(400, json={"error": "invalid_grant"}))

    result = await exchanger.exchange_code("used-code")

    assert result == Err(ProviderError(status_code=400, error="invalid_grant", description=None))
    assert result.error.kind == "provider_error"


@pytest.mark.asyncio
@respx.mock
async def test_provider_error_with_description(exchanger):
    respx.post(DISCORD_TOKEN_URL).mock(
        return_value=Response(
            400,
            json={"error": "invalid_request", "error_description": 'Invalid "redirect_uri" in request.'},
        )
    )

    result = await exchanger.exchange_code("code")

    assert isinstance(result.error, ProviderError)
    assert result.error.description == 'Invalid "redirect_uri" in request.'
    assert result.error.describe().startswith("invalid_request: ")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        Response(500, text="upstream exploded"),
        Response(401, json={"message": "401: Unauthorized", "code": 0}),
        Response(429, json=["not", "an", "object"]),
    ],
)
@respx.mock
async def test_non_oauth_error_body_is_http_status_error(exchanger, response):
    respx.post(DISCORD_TOKEN_URL).mock(return_value=response)

    result = await exchanger.exchange_code("code")

    assert result == Err(HttpStatusError(response.status_code))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        Response(200, content=b"{not json", headers={"Content-Type": "application/json"}),
        Response(200, content=b""),
        Response(200, json=["abc"]),
        Response(200, json={"token_type": "bearer"}),
        Response(200, json={"access_token": ""}),
        Response(200, json={"access_token": 123}),
        Response(200, json={"access_token": "abc", "expires_in": "soon"}),
    ],
)
@respx.mock
async def test_malformed_success_body_is_decode_failure(exchanger, response):
    respx.post(DISCORD_TOKEN_URL).mock(return_value=response)

    result = await exchanger.exchange_code("code")

    assert result.is_err
    assert isinstance(result.error, DecodeFailure)


@pytest.mark.asyncio
@respx.mock
async def test_connection_failure_is_not_retried(exchanger):
    route = respx.post(DISCORD_TOKEN_URL).mock(side_effect=httpx.ConnectError("Connection refused"))

    result = await exchanger.exchange_code("one-time-code")

    assert isinstance(result, Err)
    assert isinstance(result.error, NetworkFailure)
    assert route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_timeout_is_network_failure(exchanger):
    route = respx.post(DISCORD_TOKEN_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

    result = await exchanger.exchange_code("one-time-code")

    assert isinstance(result.error, NetworkFailure)
    assert route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_certificate_failure_is_tls_failure(exchanger):
    route = respx.post(DISCORD_TOKEN_URL).mock(
        side_effect=httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED] certificate verify failed")
    )

    result = await exchanger.exchange_code("one-time-code")

    assert isinstance(result.error, TlsFailure)
    assert result.error.kind == "tls_failure"
    assert route.call_count == 1


@pytest.mark.asyncio
async def test_injected_client_is_reused_and_left_open():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json={"access_token": "pooled"})

    config = OAuthConfig(
        credentials=ClientCredentials(1, "s"),
        redirect_uri=REDIRECT,
        token_url="https://tokens.example.test/oauth2/token",
    )
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        exchanger = TokenExchanger(config, client=client)
        first = await exchanger.exchange_code("a")
        second = await exchanger.exchange_code("b")
        assert not client.is_closed

    assert first.value.access_token == second.value.access_token == "pooled"
    assert [str(url) for url in seen] == ["https://tokens.example.test/oauth2/token"] * 2


@pytest.mark.asyncio
@respx.mock
async def test_unknown_granted_scopes_are_ignored(exchanger):
    respx.post(DISCORD_TOKEN_URL).mock(
        return_value=Response(
            200,
            json={"access_token": "abc", "token_type": "Bearer", "scope": "identify openid brand.new.scope"},
        )
    )

    result = await exchanger.exchange_code("code")

    assert isinstance(result, Ok)
    assert result.value.scope == {Scope.IDENTIFY, Scope.OPENID}


@pytest.mark.asyncio
@respx.mock
async def test_non_string_scope_entries_are_decode_failure(exchanger):
    respx.post(DISCORD_TOKEN_URL).mock(
        return_value=Response(200, json={"access_token": "abc", "scope": ["identify", {"name": "email"}]})
    )

    result = await exchanger.exchange_code("code")

    assert isinstance(result.error, DecodeFailure)


@pytest.mark.asyncio
@respx.mock
async def test_content_encoding_mismatch_is_decode_failure(exchanger):
    route = respx.post(DISCORD_TOKEN_URL).mock(
        return_value=Response(200, content=b"not gzip", headers={"Content-Encoding": "gzip"})
    )

    result = await exchanger.exchange_code("code")

    assert isinstance(result, Err)
    assert isinstance(result.error, DecodeFailure)
    assert route.call_count == 1


@pytest.mark.asyncio
@respx.mock
async def test_ssl_error_in_cause_chain_is_tls_failure(exchanger):
    def handshake_fails(request: httpx.Request):
        try:
            raise ssl.SSLCertVerificationError(1, "certificate verify failed: self-signed certificate")
        except ssl.SSLError as exc:
            raise httpx.ConnectError("handshake failed", request=request) from exc

    route = respx.post(DISCORD_TOKEN_URL).mock(side_effect=handshake_fails)

    result = await exchanger.exchange_code("one-time-code")

    assert isinstance(result.error, TlsFailure)
    assert result.error.detail == "handshake failed"
    assert route.call_count == 1
