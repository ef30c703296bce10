from discord_oauth.settings.config import OAuthSettings, Settings, get_settings

__all__ = ["OAuthSettings", "Settings", "get_settings"]
