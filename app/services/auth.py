from app.core.interfaces import AuthProvider
from config.logger import logger


class SimulatedAuthProvider(AuthProvider):
    """Local stand-in for a real identity service: any non-empty email and password pass."""

    def verify(self, email: str, password: str) -> str | None:
        email = (email or "").strip()
        if not email or not password:
            logger.info("SimulatedAuth: rejected empty credentials")
            return None
        logger.info(f"SimulatedAuth: accepted {email}")
        return email


def get_auth_provider() -> AuthProvider:
    return SimulatedAuthProvider()
