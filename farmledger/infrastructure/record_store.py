"""
Infrastructure layer: Snapshot persistence, local or remote.

The whole farm dataset is stored as one snapshot. The local store keeps one
JSON file per collection; the remote store upserts a single row keyed by a
fixed id, so the last writer wins.
"""
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from farmledger.config import settings
from farmledger.domain.models import FarmSnapshot
from farmledger.infrastructure.api_constants import (
    APIConstants,
    LocalStoreSlots,
    RowStoreEndpoints,
)

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when the snapshot cannot be read or written."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RecordStore(ABC):
    """Reads and writes the farm snapshot."""

    @abstractmethod
    async def load(self) -> Optional[FarmSnapshot]:
        """Return the stored snapshot, or None when nothing was saved yet."""

    @abstractmethod
    async def save(self, snapshot: FarmSnapshot) -> None:
        """Persist the snapshot, raising PersistenceError on failure."""

    async def close(self) -> None:
        """Release any held resources."""


class LocalRecordStore(RecordStore):
    """
    Snapshot store backed by a directory of JSON files.

    Each snapshot key lives in its own file. A missing or unreadable file
    falls back to that collection's default.
    """

    def __init__(self, data_dir: Optional[str] = None):
        self.data_dir = Path(data_dir or settings.local_data_dir)

    async def load(self) -> Optional[FarmSnapshot]:
        data: Dict[str, Any] = {}
        for key, filename in LocalStoreSlots.BY_KEY.items():
            path = self.data_dir / filename
            if not path.exists():
                continue
            try:
                data[key] = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable slot {path}: {e}")

        if not data:
            return None

        try:
            return FarmSnapshot.model_validate(data)
        except ValidationError as e:
            raise PersistenceError(f"Stored data is invalid: {e}", status_code=500)

    async def save(self, snapshot: FarmSnapshot) -> None:
        payload = snapshot.model_dump(mode="json", by_alias=True)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            for key, filename in LocalStoreSlots.BY_KEY.items():
                path = self.data_dir / filename
                tmp_path = path.with_suffix(".tmp")
                tmp_path.write_text(
                    json.dumps(payload[key], ensure_ascii=False),
                    encoding="utf-8",
                )
                os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write local snapshot: {e}")
            raise PersistenceError(f"Failed to write local data: {e}", status_code=500)


class RemoteRecordStore(RecordStore):
    """
    Snapshot store backed by one row of a remote PostgREST table.

    Implements optional retry logic with exponential backoff.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        table: Optional[str] = None,
        row_id: Optional[int] = None,
        content_column: Optional[str] = None,
    ):
        """Initialize the row-store client with configuration."""
        self.base_url = base_url if base_url is not None else settings.remote_base_url
        self.api_key = api_key if api_key is not None else settings.remote_api_key
        self.table = table or settings.remote_table
        self.row_id = row_id if row_id is not None else settings.remote_row_id
        self.content_column = content_column or settings.remote_content_column
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "accept": APIConstants.CONTENT_TYPE_JSON,
            },
            timeout=settings.request_timeout,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _send(self, method: str, endpoint: str, **kwargs) -> httpx.Response:
        response = await self.client.request(method, endpoint, **kwargs)
        if response.status_code >= 500:
            # Server errors are worth another attempt
            response.raise_for_status()
        return response

    async def _make_request(self, method: str, endpoint: str, **kwargs) -> Any:
        """
        Make an HTTP request against the row-store.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Endpoint path
            **kwargs: Additional arguments for the request

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            PersistenceError: If the request fails
        """
        if not self.configured:
            raise PersistenceError("Remote store is not configured", status_code=503)
        try:
            response = await self._send(method, endpoint, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"Row-store request failed: {e.response.status_code} - {e.response.text}"
            )
        except httpx.RequestError as e:
            raise PersistenceError(f"Row-store request error: {str(e)}")

        if not response.content:
            return None
        return response.json()

    async def load(self) -> Optional[FarmSnapshot]:
        """
        Fetch the snapshot row.

        Returns:
            FarmSnapshot, or None when the row does not exist yet

        Raises:
            PersistenceError: If the request fails or the content is invalid
        """
        try:
            rows = await self._make_request(
                "GET",
                RowStoreEndpoints.table(self.table),
                params={"id": f"eq.{self.row_id}", "select": self.content_column},
            )
        except PersistenceError as e:
            logger.error(f"Failed to fetch snapshot: {e.message}")
            raise

        if not rows or rows[0].get(self.content_column) is None:
            return None

        try:
            return FarmSnapshot.model_validate(rows[0][self.content_column])
        except ValidationError as e:
            raise PersistenceError(f"Stored data is invalid: {e}")

    async def save(self, snapshot: FarmSnapshot) -> None:
        """
        Upsert the snapshot row.

        Raises:
            PersistenceError: If the write is rejected or the store is unreachable
        """
        body = [{
            "id": self.row_id,
            self.content_column: snapshot.model_dump(mode="json", by_alias=True),
        }]
        try:
            await self._make_request(
                "POST",
                RowStoreEndpoints.table(self.table),
                params={"on_conflict": "id"},
                json=body,
                headers={"Prefer": APIConstants.PREFER_UPSERT},
            )
        except PersistenceError as e:
            logger.error(f"Failed to save snapshot: {e.message}")
            raise


# Singleton instance
_record_store: Optional[RecordStore] = None


def get_record_store() -> RecordStore:
    """
    Get or create the singleton record store for the configured backend.

    Returns:
        RecordStore instance
    """
    global _record_store
    if _record_store is None:
        if settings.storage_backend == "remote":
            _record_store = RemoteRecordStore()
        else:
            _record_store = LocalRecordStore()
        logger.info(f"Using {settings.storage_backend} record store")
    return _record_store
