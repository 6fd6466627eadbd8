"""
Durable session storage.

The session is a single small document (tokens plus cached identity). Every
write replaces the whole document, so readers only ever see the state before
or after a write, never a mix. Writers are serialized with an asyncio lock and
the last write wins.
"""
import asyncio
import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiofiles
import aiofiles.os
import structlog
from pydantic import ValidationError as PydanticValidationError

from ..config import Settings
from ..models.auth import Session
from ..utils.constants import REFRESH_TOKEN_KEY, TOKEN_KEY
from ..utils.exceptions import StorageError

logger = structlog.get_logger()

_fsync = aiofiles.os.wrap(os.fsync)


class SessionStore(ABC):
    """Scoped read/write/clear access to the persisted session."""

    def __init__(self):
        self._lock = asyncio.Lock()

    @abstractmethod
    async def _read(self) -> Dict[str, Any]:
        """Return the stored document, or an empty dict when nothing is stored."""

    @abstractmethod
    async def _write(self, document: Dict[str, Any]) -> None:
        """Replace the stored document."""

    @abstractmethod
    async def _delete(self) -> None:
        """Remove the stored document."""

    async def load(self) -> Session:
        """Read the full session; an empty store yields an empty session."""
        document = await self._read()
        try:
            return Session.model_validate(document)
        except PydanticValidationError as e:
            logger.error("Stored session is malformed", error=str(e))
            raise StorageError(
                message="Stored session is malformed",
                details=[str(e)]
            )

    async def save(self, session: Session) -> None:
        """Persist a whole session, replacing whatever was stored."""
        async with self._lock:
            await self._write(session.to_storage())
        logger.debug("Session saved", user_id=session.user_id)

    async def save_tokens(self, access_token: str, refresh_token: str) -> None:
        """Overwrite both tokens, keeping the cached identity."""
        async with self._lock:
            document = await self._read()
            document[TOKEN_KEY] = access_token
            document[REFRESH_TOKEN_KEY] = refresh_token
            await self._write(document)
        logger.debug("Session tokens rotated")

    async def get_access_token(self) -> Optional[str]:
        return (await self._read()).get(TOKEN_KEY) or None

    async def get_refresh_token(self) -> Optional[str]:
        return (await self._read()).get(REFRESH_TOKEN_KEY) or None

    async def clear(self) -> None:
        """Remove every session field in one step."""
        async with self._lock:
            await self._delete()
        logger.info("Session cleared")


class InMemorySessionStore(SessionStore):
    """Session store kept in process memory."""

    def __init__(self, initial: Optional[Session] = None):
        super().__init__()
        self._document: Dict[str, Any] = initial.to_storage() if initial else {}

    async def _read(self) -> Dict[str, Any]:
        return dict(self._document)

    async def _write(self, document: Dict[str, Any]) -> None:
        self._document = dict(document)

    async def _delete(self) -> None:
        self._document = {}


class FileSessionStore(SessionStore):
    """
    Session store persisted as a JSON document on disk.

    Writes go to a temporary file that is fsynced and then renamed over the
    document, so a crash leaves either the old or the new session.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path

    async def _read(self) -> Dict[str, Any]:
        try:
            if not await aiofiles.os.path.exists(self.path):
                return {}
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Failed to read session file", path=self.path, error=str(e))
            raise StorageError(
                message="Failed to read session",
                details=[str(e)]
            )

        if not raw.strip():
            return {}

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Session file is not valid JSON", path=self.path, error=str(e))
            raise StorageError(
                message="Session file is corrupt",
                details=[str(e)]
            )

        if not isinstance(document, dict):
            raise StorageError(
                message="Session file is corrupt",
                details=["Expected a JSON object"]
            )
        return document

    async def _write(self, document: Dict[str, Any]) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            directory = os.path.dirname(self.path)
            if directory:
                await aiofiles.os.makedirs(directory, exist_ok=True)

            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(document))
                await f.flush()
                await _fsync(f.fileno())

            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write session file", path=self.path, error=str(e))
            await self._discard(tmp_path)
            raise StorageError(
                message="Failed to write session",
                details=[str(e)]
            )

    async def _discard(self, tmp_path: str) -> None:
        """Remove a half-written temporary file."""
        try:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
        except OSError as e:
            logger.warning("Failed to remove temporary session file", path=tmp_path, error=str(e))

    async def _delete(self) -> None:
        try:
            if await aiofiles.os.path.exists(self.path):
                await aiofiles.os.remove(self.path)
        except OSError as e:
            logger.error("Failed to clear session file", path=self.path, error=str(e))
            raise StorageError(
                message="Failed to clear session",
                details=[str(e)]
            )


def create_session_store(settings: Settings) -> SessionStore:
    """Build the session store selected by settings."""
    path = settings.session_path
    if path is None:
        return InMemorySessionStore()
    return FileSessionStore(path)
