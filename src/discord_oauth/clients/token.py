from __future__ import annotations

import json
import ssl
from typing import Any, Mapping, Optional, Union

import httpx
from pydantic import ValidationError

from discord_oauth.clients.errors import (
    DecodeFailure,
    HttpStatusError,
    NetworkFailure,
    OAuthError,
    ProviderError,
    TlsFailure,
)
from discord_oauth.clients.result import Err, Ok
from discord_oauth.clients.types import (
    AccessTokenExchangeRequest,
    AccessTokenResponse,
    OAuthConfig,
)

ExchangeResult = Union[Ok[AccessTokenResponse], Err[OAuthError]]

_FORM_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "Accept": "application/json",
}


class TokenExchanger:
    """Exchanges authorization codes at the token endpoint.

    Each call issues exactly one POST. Failed exchanges are never retried: the
    provider may already have consumed the code, so the caller has to restart
    the flow with a fresh one.

    An ``httpx.AsyncClient`` may be supplied to reuse a connection pool; it is
    left open. Otherwise a short-lived client is created per exchange.
    """

    def __init__(
        self,
        config: OAuthConfig,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._config = config
        self._client = client
        self._timeout = timeout

    async def exchange_code(self, code: str) -> ExchangeResult:
        return await self.exchange(AccessTokenExchangeRequest.from_config(self._config, code))

    async def exchange(self, request: AccessTokenExchangeRequest) -> ExchangeResult:
        try:
            resp = await self._post(request.to_form())
        except httpx.DecodingError as exc:
            # Content-Encoding did not match the bytes on the wire
            return Err(DecodeFailure(f"could not decode response body ({exc})"))
        except httpx.TransportError as exc:
            return Err(_transport_error(exc))

        if not resp.is_success:
            return Err(_status_error(resp))

        try:
            payload = resp.json()
        except ValueError as exc:
            return Err(DecodeFailure(f"body is not valid JSON ({exc})"))
        if not isinstance(payload, dict):
            return Err(DecodeFailure(f"expected a JSON object, got {type(payload).__name__}"))

        try:
            token = AccessTokenResponse.model_validate(payload)
        except ValidationError as exc:
            return Err(DecodeFailure(_summarize_validation(exc)))
        return Ok(token)

    async def _post(self, data: Mapping[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(
                self._config.token_url, data=data, headers=_FORM_HEADERS, timeout=self._timeout
            )
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self._config.token_url, data=data, headers=_FORM_HEADERS)


def _transport_error(exc: httpx.TransportError) -> OAuthError:
    detail = str(exc) or type(exc).__name__
    if _caused_by_tls(exc):
        return TlsFailure(detail)
    return NetworkFailure(detail)


def _caused_by_tls(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLError):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    # httpcore re-raises TLS failures as ConnectError without keeping the chain
    text = str(exc)
    return "SSL" in text or "CERTIFICATE_VERIFY_FAILED" in text


def _status_error(resp: httpx.Response) -> OAuthError:
    payload = _safe_json(resp)
    error = payload.get("error")
    if isinstance(error, str) and error:
        description = payload.get("error_description")
        return ProviderError(
            status_code=resp.status_code,
            error=error,
            description=description if isinstance(description, str) else None,
        )
    return HttpStatusError(resp.status_code)


def _safe_json(resp: httpx.Response) -> dict[str, Any]:
    try:
        data = json.loads(resp.content)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _summarize_validation(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "body"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
