"""OAuth2 JWT-bearer grant: assertion signing and token exchange."""

from .assertion import base64url, build_jwt_assertion
from .token import GoogleTokenExchanger, TokenExchanger

__all__ = ["base64url", "build_jwt_assertion", "GoogleTokenExchanger", "TokenExchanger"]
