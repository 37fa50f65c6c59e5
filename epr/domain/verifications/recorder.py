"""Best-effort writer for the verification audit trail.

Each record is written in its own session so that a failed insert can never
unwind a settlement that has already committed. Failed drafts are kept in an
in-memory queue and replayed by :meth:`VerificationRecorder.retry_pending`,
either on demand or periodically from :meth:`VerificationRecorder.start_retry_loop`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from contextlib import suppress
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from epr.domain.common.money import to_cents
from epr.infrastructure.database.repositories.verification_repository import SqlVerificationRepository

from .models import VerificationDraft
from .repository import VerificationAuditRepository

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[AsyncSession], VerificationAuditRepository]


class VerificationRecorder:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository_factory: RepositoryFactory = SqlVerificationRepository,
        max_pending: int = 10_000,
    ) -> None:
        self._session_factory = session_factory
        self._repository_factory = repository_factory
        self._pending: deque[VerificationDraft] = deque(maxlen=max_pending)
        self._retry_task: Optional[asyncio.Task] = None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def record(self, draft: VerificationDraft) -> str | None:
        """Append one audit row; returns its id, or ``None`` if it was queued for retry."""
        try:
            return await self._write(draft)
        except SQLAlchemyError as exc:
            draft.attempts += 1
            logger.error(
                "Failed to record verification of %s for requester %s, queued for retry: %s",
                draft.bill_number,
                draft.requester_id,
                exc,
            )
            self._enqueue(draft)
            return None

    async def retry_pending(self) -> int:
        """Replay queued drafts once each; returns how many were written."""
        written = 0
        for _ in range(len(self._pending)):
            draft = self._pending.popleft()
            try:
                await self._write(draft)
            except asyncio.CancelledError:
                self._pending.appendleft(draft)
                raise
            except SQLAlchemyError as exc:
                draft.attempts += 1
                logger.warning(
                    "Retry %s of verification record for %s failed: %s",
                    draft.attempts,
                    draft.bill_number,
                    exc,
                )
                self._pending.append(draft)
            else:
                written += 1
        return written

    def start_retry_loop(self, interval: float) -> None:
        """Replay queued drafts every ``interval`` seconds until stopped."""
        if self._retry_task and not self._retry_task.done():
            self._retry_task.cancel()
        self._retry_task = asyncio.create_task(self._retry_loop(interval))

    async def stop_retry_loop(self) -> None:
        task, self._retry_task = self._retry_task, None
        if task is None:
            return
        task.cancel()
        # a task cancelled before its first step never reaches _retry_loop's handler
        with suppress(asyncio.CancelledError):
            await task

    async def _retry_loop(self, interval: float) -> None:
        try:
            while True:
                await asyncio.sleep(interval)
                if not self._pending:
                    continue
                queued = len(self._pending)
                written = await self.retry_pending()
                if written:
                    logger.info("Replayed %s of %s queued verification records", written, queued)
        except asyncio.CancelledError:
            logger.debug("Verification retry loop cancelled")

    def _enqueue(self, draft: VerificationDraft) -> None:
        if len(self._pending) == self._pending.maxlen:
            dropped = self._pending[0]
            logger.critical("Verification retry queue full, dropping record for %s", dropped.bill_number)
        self._pending.append(draft)

    async def _write(self, draft: VerificationDraft) -> str:
        async with self._session_factory() as session:
            async with session.begin():
                repository = self._repository_factory(session)
                record = await repository.create(
                    bill_id=draft.bill_id,
                    bill_number=draft.bill_number,
                    requester_id=draft.requester_id,
                    requester_ip=draft.requester_ip,
                    requester_user_agent=draft.requester_user_agent,
                    disclosure=draft.disclosure.value,
                    data_revealed=json.dumps(draft.data_revealed, sort_keys=True) if draft.data_revealed is not None else None,
                    amount_charged_cents=to_cents(draft.amount_charged),
                    was_free=draft.was_free,
                    pricing_rule_applied=draft.pricing_rule,
                    verification_status=draft.status.value,
                    response_time_ms=draft.response_time_ms,
                )
                return record.id
