"""Bearer token persistence. Failures read as "logged out"."""

import logging
from pathlib import Path

from booking_client.config import settings

logger = logging.getLogger(__name__)


class TokenStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or settings.token_path

    @property
    def path(self) -> Path:
        return self._path

    def get(self) -> str | None:
        try:
            token = self._path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read token from %s: %s", self._path, e)
            return None
        return token or None

    def set(self, token: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(token, encoding="utf-8")
            self._path.chmod(0o600)
        except OSError as e:
            logger.warning("Could not persist token to %s: %s", self._path, e)
            # A half-written file must not read back as a valid session
            self.clear()

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove token at %s: %s", self._path, e)

    def is_authenticated(self) -> bool:
        """True when a non-empty token is stored. The server is not consulted."""
        return bool(self.get())
