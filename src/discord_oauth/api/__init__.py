from discord_oauth.api.auth import router as auth_router
from discord_oauth.api.system import router as system_router

__all__ = ["auth_router", "system_router"]
