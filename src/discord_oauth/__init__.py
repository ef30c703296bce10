"""Discord OAuth2 authorization code grant: URL building and code exchange."""
