"""Question image lifecycle.

Keeps ``SatQuestion.image`` and the bucket in step:

- a non-null ``image`` always points at an object that exists,
- an object that is no longer referenced (replaced, cleared, or owned by a
  deleted question) is removed from the bucket.

Storage and database are not updated atomically. Cleanup of superseded
objects is best-effort: failures are logged as ``orphaned_image`` so the
objects can be swept later, and never fail the request that caused them.
"""

import os
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote, urlsplit

from starlette.concurrency import run_in_threadpool

from sat_api.common.request_id import current_request_id
from sat_api.core.logging import get_logger
from sat_api.storage.s3 import ObjectStorage

logger = get_logger(__name__)

MAX_BASE_NAME_LENGTH = 20
DEFAULT_KEY_PREFIX = "questions"


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded image file read into memory."""

    data: bytes
    content_type: str
    filename: str


class ImageLifecycleManager:
    """Upload, replace and delete question images in object storage."""

    def __init__(self, storage: ObjectStorage, key_prefix: str = DEFAULT_KEY_PREFIX):
        self.storage = storage
        self.key_prefix = key_prefix.strip("/")

    def generate_object_key(self, original_filename: str | None) -> str:
        """Build ``{prefix}/{base[:20]}-{8 hex chars}{ext}`` for an upload.

        The suffix is the first segment of a fresh UUID4. Keys are not
        checked against the bucket; the suffix makes collisions unlikely,
        not impossible.
        """
        base, extension = os.path.splitext(os.path.basename(original_filename or ""))
        short_uuid = str(uuid.uuid4()).split("-")[0]
        return f"{self.key_prefix}/{base[:MAX_BASE_NAME_LENGTH]}-{short_uuid}{extension}"

    def key_for_reference(self, reference: str) -> str:
        """Storage key of a stored location (its last path segment under the prefix)."""
        tail = unquote(urlsplit(reference).path.rsplit("/", 1)[-1])
        return f"{self.key_prefix}/{tail}"

    async def upload_image(self, data: bytes, content_type: str, original_filename: str | None) -> str:
        """Store a new image and return the location reported by the store.

        Raises StorageWriteError if the store rejects the write.
        """
        key = self.generate_object_key(original_filename)
        location = await run_in_threadpool(self.storage.put, key, data, content_type)
        logger.info(
            "image_uploaded",
            extra={
                "event": "image_uploaded",
                "key": key,
                "size_bytes": len(data),
                "content_type": content_type,
                "request_id": current_request_id(),
            },
        )
        return location

    async def replace_image(
        self,
        existing_reference: str | None,
        data: bytes,
        content_type: str,
        original_filename: str | None,
        persist: Callable[[str], bool] | None = None,
        defer: Callable[..., Any] | None = None,
    ) -> str | None:
        """Upload a new image, record it, then discard the one it supersedes.

        The new object is written first, so a failed upload leaves the
        current image untouched. ``persist`` stores the new location and
        reports whether a row took it; if it returns False or raises, the new
        object is discarded, ``existing_reference`` is kept and the result is
        None (or the exception propagates).

        Cleanup of ``existing_reference`` only happens after a successful
        persist. It is handed to ``defer`` (e.g. ``BackgroundTasks.add_task``)
        when given, otherwise it runs immediately.
        """
        location = await self.upload_image(data, content_type, original_filename)

        if persist is not None:
            try:
                stored = persist(location)
            except Exception:
                await self.discard_image(location)
                raise
            if not stored:
                await self.discard_image(location)
                return None

        if existing_reference:
            if defer is not None:
                defer(self.discard_image, existing_reference, request_id=current_request_id())
            else:
                await self.discard_image(existing_reference)
        return location

    async def delete_image(self, reference: str | None, request_id: str | None = None) -> None:
        """Delete the object behind ``reference``. Raises StorageDeleteError."""
        if not reference:
            return
        key = self.key_for_reference(reference)
        await run_in_threadpool(self.storage.delete, key)
        logger.info(
            "image_deleted",
            extra={"event": "image_deleted", "key": key, "request_id": request_id or current_request_id()},
        )

    async def discard_image(self, reference: str | None, request_id: str | None = None) -> bool:
        """Best-effort delete. Returns False (and logs) instead of raising.

        Pass ``request_id`` when scheduling this outside the request so the
        warning stays attributable.
        """
        if not reference:
            return True
        request_id = request_id or current_request_id()
        try:
            await self.delete_image(reference, request_id=request_id)
        except Exception as e:
            logger.warning(
                "orphaned_image",
                extra={
                    "event": "orphaned_image",
                    "reference": reference,
                    "key": self.key_for_reference(reference),
                    "error": str(e),
                    "request_id": request_id,
                },
            )
            return False
        return True
