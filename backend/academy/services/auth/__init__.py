from academy.services.auth.dto import AuthTokenConfig, LoginIn, SessionOut
from academy.services.auth.service import AuthService

__all__ = ["AuthService", "AuthTokenConfig", "LoginIn", "SessionOut"]
