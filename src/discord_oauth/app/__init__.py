from discord_oauth.app.factory import create_app

__all__ = ["create_app"]
