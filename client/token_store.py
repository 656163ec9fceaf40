import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_FILE = Path(os.getenv("MEDIBOOK_TOKEN_FILE", Path.home() / ".medibook" / "session.json"))


class TokenStore:
    """Session cache on disk: the bearer token and the user it belongs to."""

    def __init__(self, path=DEFAULT_TOKEN_FILE):
        self.path = Path(path)
        self._session = None

    def load(self) -> dict:
        if self._session is not None:
            return self._session
        if not self.path.exists():
            logger.debug("No saved session file found")
            self._session = {}
            return self._session
        try:
            with open(self.path, encoding="utf-8") as f:
                self._session = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load session: %s", e)
            self._session = {}
        return self._session

    def save(self, token: str, user: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._session = {"token": token, "user": user}
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._session, f)
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self.path)
        logger.info("Session saved for %s", user.get("email"))

    def update_user(self, user: dict) -> None:
        token = self.token
        if token:
            self.save(token, user)

    def clear(self) -> None:
        self._session = {}
        if self.path.exists():
            self.path.unlink()
            logger.info("Session cleared")

    @property
    def token(self) -> Optional[str]:
        return self.load().get("token")

    @property
    def user(self) -> Optional[dict]:
        return self.load().get("user")
