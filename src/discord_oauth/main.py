"""
Entry point for the Discord OAuth example server.
"""
import sys

import uvicorn
from dotenv import load_dotenv

from discord_oauth.clients import ConfigurationError
from discord_oauth.settings import get_settings


def main() -> None:
    """Validate configuration and serve the app with uvicorn."""
    load_dotenv()
    s = get_settings()
    try:
        s.oauth.to_config()
        s.oauth.scope_set()
    except ConfigurationError as exc:
        sys.exit(f"[discord-oauth] {exc}")

    ssl_kwargs = {}
    if s.oauth.ssl_certfile and s.oauth.ssl_keyfile:
        ssl_kwargs = {"ssl_certfile": s.oauth.ssl_certfile, "ssl_keyfile": s.oauth.ssl_keyfile}
        print(f"[discord-oauth] TLS enabled: cert={s.oauth.ssl_certfile} key={s.oauth.ssl_keyfile}")
    else:
        print("[discord-oauth] TLS disabled: serving HTTP. Set DISCORD_OAUTH__SSL_CERTFILE and __SSL_KEYFILE.")
    print(f"[discord-oauth] redirect URI: {s.oauth.redirect_uri}")

    uvicorn.run(
        "discord_oauth.app:create_app",
        factory=True,
        host=s.server.host,
        port=s.server.port,
        reload=s.server.reload,
        log_level=s.server.log_level,
        **ssl_kwargs,
    )


if __name__ == "__main__":
    main()
