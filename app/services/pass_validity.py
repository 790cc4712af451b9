"""
Pass Validity Resolution
Decides whether a student currently holds an approved, unexpired bus pass.

Approved requests may sit in any of the configured sources (the general
pool and every route pool). All sources are read concurrently; the first
source that reports a currently valid record settles the answer and the
remaining reads are cancelled. A source that fails or times out counts as
having no valid records, so an outage can only under-report a pass.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Sequence

from app.exceptions import InvalidStudentIdError
from app.models.pass_request import PassRequest, PassStatus
from app.services.timestamps import decode_native_datetime, utcnow

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_PERIOD = timedelta(days=365)
DEFAULT_SOURCE_TIMEOUT = 10.0


def effective_expiry(
    request: PassRequest,
    validity_period: timedelta = DEFAULT_VALIDITY_PERIOD,
) -> Optional[datetime]:
    """
    Expiration of an approved request.

    An explicit valid_until always wins. Otherwise the pass runs for
    `validity_period` from approved_at, or from request_date when the
    approval time was never stamped. None when no timestamp is usable.
    """
    if request.valid_until is not None:
        return request.valid_until

    approved_at = request.approved_at or request.request_date
    if approved_at is None:
        return None
    return approved_at + validity_period


def is_currently_valid(
    request: PassRequest,
    now: datetime,
    validity_period: timedelta = DEFAULT_VALIDITY_PERIOD,
) -> bool:
    if request.status != PassStatus.APPROVED:
        return False
    expiry = effective_expiry(request, validity_period)
    return expiry is not None and expiry > now


class PassValidityResolver:
    """
    Resolves `has_approved_pass` for a student.

    `store` needs one coroutine, `query_approved_requests(source_id,
    student_id)`, returning the approved requests of that student in that
    source. `sources` is the list of source ids to scan.
    """

    def __init__(
        self,
        store,
        sources: Iterable[str],
        clock: Callable[[], datetime] = utcnow,
        source_timeout: Optional[float] = DEFAULT_SOURCE_TIMEOUT,
        validity_period: timedelta = DEFAULT_VALIDITY_PERIOD,
    ):
        self.store = store
        self.sources: List[str] = list(sources)
        self.clock = clock
        self.source_timeout = source_timeout
        self.validity_period = validity_period

    async def resolve_pass_validity(self, student_id: str) -> bool:
        """True when any source holds a currently valid approved request"""
        if not isinstance(student_id, str) or not student_id.strip():
            raise InvalidStudentIdError(student_id)

        reading = self.clock()
        now = decode_native_datetime(reading)
        if now is None:
            raise TypeError(f"Clock must return a datetime, got {type(reading).__name__}")

        tasks = [
            asyncio.ensure_future(self._source_has_valid_pass(source, student_id, now))
            for source in self.sources
        ]
        try:
            for finished in asyncio.as_completed(tasks):
                if await finished:
                    return True
            return False
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def _read_source(self, source_id: str, student_id: str) -> Sequence[PassRequest]:
        query = self.store.query_approved_requests(source_id, student_id)
        if self.source_timeout is None:
            return await query
        return await asyncio.wait_for(query, timeout=self.source_timeout)

    async def _source_has_valid_pass(self, source_id: str, student_id: str, now: datetime) -> bool:
        try:
            requests = await self._read_source(source_id, student_id)
        except asyncio.TimeoutError:
            logger.warning(
                "Pass source %s timed out after %ss for student %s",
                source_id, self.source_timeout, student_id
            )
            return False
        except Exception as exc:
            logger.warning(
                "Pass source %s unavailable for student %s: %s",
                source_id, student_id, exc
            )
            return False

        return any(
            is_currently_valid(request, now, self.validity_period)
            for request in requests
        )
