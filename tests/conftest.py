import httpx
import pytest

from discord_oauth.settings.config import OAuthSettings, Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(oauth=OAuthSettings(client_id=123, client_secret="shh-secret"))


@pytest.fixture
def token_requests():
    return []


@pytest.fixture
def token_reply():
    """Mutable holder for the next token endpoint response."""
    return {"response": httpx.Response(200, json={"access_token": "abc-token", "token_type": "Bearer"})}


@pytest.fixture
def mock_token_client(token_requests, token_reply):
    def handler(request: httpx.Request) -> httpx.Response:
        token_requests.append(request)
        return token_reply["response"]

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
