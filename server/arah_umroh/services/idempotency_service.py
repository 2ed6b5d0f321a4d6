"""Idempotency service for replaying money-moving requests safely."""

import hashlib
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional

from fastapi.responses import JSONResponse
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import IdempotencyMismatchError, ProblemDetailsException
from ..models.idempotency import IdempotencyRecord

logger = logging.getLogger(__name__)


class IdempotencyService:
    """Service for handling idempotent operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _compute_request_hash(self, request_body: dict[str, Any]) -> str:
        """Compute SHA-256 hash of normalized request body."""
        normalized = json.dumps(request_body, sort_keys=True, separators=(",", ":"), default=str)
        return hashlib.sha256(normalized.encode("utf-8")).hexdigest()

    async def check_idempotency(
        self,
        idempotency_key: str,
        method: str,
        request_body: dict[str, Any],
        user_id: Optional[str] = None,
    ) -> Optional[tuple[int, Any]]:
        """
        Return the cached ``(status_code, body)`` for a repeated request, or None if new.

        Keys are looked up per caller, so two users may use the same key.

        Raises:
            IdempotencyMismatchError: If key exists with different request body
        """
        request_hash = self._compute_request_hash(request_body)

        if user_id is None:
            same_caller = IdempotencyRecord.user_id.is_(None)
        else:
            same_caller = IdempotencyRecord.user_id == user_id

        stmt = select(IdempotencyRecord).where(
            IdempotencyRecord.idempotency_key == idempotency_key,
            IdempotencyRecord.method == method,
            IdempotencyRecord.expires_at > datetime.utcnow(),
            same_caller,
        )
        result = await self.db.execute(stmt)
        existing_record = result.scalar_one_or_none()

        if existing_record is None:
            return None

        if existing_record.request_body_hash != request_hash:
            logger.warning(
                "Idempotency key mismatch",
                extra={
                    "idempotency_key": idempotency_key,
                    "method": method,
                    "existing_hash": existing_record.request_body_hash[:8],
                    "new_hash": request_hash[:8],
                }
            )
            raise IdempotencyMismatchError(idempotency_key, method)

        logger.info(
            "Returning cached idempotent response",
            extra={
                "idempotency_key": idempotency_key,
                "method": method,
                "status_code": existing_record.response_status_code,
                "created_at": existing_record.created_at.isoformat(),
            }
        )
        return existing_record.response_status_code, json.loads(existing_record.response_body)

    async def store_response(
        self,
        idempotency_key: str,
        method: str,
        request_body: dict[str, Any],
        status_code: int,
        response_body: Any,
        user_id: Optional[str] = None,
    ) -> None:
        """Store the response of an idempotent operation until the configured TTL passes."""
        expires_at = datetime.utcnow() + timedelta(seconds=settings.idempotency_ttl_seconds)

        record = IdempotencyRecord(
            idempotency_key=idempotency_key,
            method=method,
            request_body_hash=self._compute_request_hash(request_body),
            response_status_code=status_code,
            response_body=json.dumps(response_body, sort_keys=True, separators=(",", ":"), default=str),
            expires_at=expires_at,
            user_id=user_id,
        )

        try:
            self.db.add(record)
            await self.db.commit()

            logger.info(
                "Stored idempotency record",
                extra={
                    "idempotency_key": idempotency_key,
                    "method": method,
                    "status_code": status_code,
                    "expires_at": expires_at.isoformat(),
                }
            )
        except IntegrityError as e:
            # A concurrent request with the same key stored its response first
            await self.db.rollback()
            logger.info(
                "Idempotency record already exists (race condition)",
                extra={"idempotency_key": idempotency_key, "method": method, "error": str(e)}
            )

    async def execute(
        self,
        method: str,
        idempotency_key: str,
        request_body: dict[str, Any],
        operation: Callable[[], Awaitable[Any]],
        user_id: Optional[str] = None,
    ) -> JSONResponse:
        """
        Run ``operation`` once per idempotency key and replay its response afterwards.

        Records are keyed by caller, key and method, so one user's key can never
        replay or block another user's request. Problem responses are cached too; the
        failed transaction is rolled back before the record is written.
        """
        scoped_body = {"user_id": user_id, "body": request_body}

        cached_response = await self.check_idempotency(idempotency_key, method, scoped_body, user_id=user_id)
        if cached_response:
            status_code, response_body = cached_response
            return JSONResponse(status_code=status_code, content=response_body)

        try:
            response_body = await operation()
        except ProblemDetailsException as e:
            await self.db.rollback()
            await self.store_response(
                idempotency_key, method, scoped_body, e.status_code, e.problem_details, user_id=user_id
            )
            raise

        await self.store_response(idempotency_key, method, scoped_body, 200, response_body, user_id=user_id)
        return JSONResponse(status_code=200, content=response_body)

    async def cleanup_expired_records(self) -> int:
        """Delete expired idempotency records and return how many were removed."""
        result = await self.db.execute(
            delete(IdempotencyRecord).where(IdempotencyRecord.expires_at <= datetime.utcnow())
        )
        deleted_count = result.rowcount or 0
        await self.db.commit()

        if deleted_count > 0:
            logger.info("Cleaned up expired idempotency records", extra={"deleted_count": deleted_count})
        return deleted_count
