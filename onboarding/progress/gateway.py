"""Progress update gateway.

The boundary between the training core and persistence. Every write is a
merge: the given fields are laid over the stored record (or over the defaults
when there is none), unspecified fields are never overwritten.

Read failures raise GatewayReadFailure and are never reported as "no progress
yet"; write failures raise GatewayWriteFailure.
"""

from typing import TYPE_CHECKING, Any, Protocol
from uuid import UUID

import structlog

from .exceptions import GatewayReadFailure, GatewayWriteFailure
from .models import ProgressRecord


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class ProgressGateway(Protocol):
    """Persistence contract for progress records."""

    async def read_progress(
        self, learner_id: str, module_id: UUID
    ) -> ProgressRecord | None: ...

    async def list_progress(self, learner_id: str) -> list[ProgressRecord]: ...

    async def list_module_progress(self, module_id: UUID) -> list[ProgressRecord]: ...

    async def write_progress(
        self, learner_id: str, module_id: UUID, **fields: Any
    ) -> ProgressRecord: ...

    async def delete_learner_progress(self, learner_id: str) -> None: ...


# ==============================================================================
# In-memory Gateway
# ==============================================================================


class InMemoryProgressGateway:
    """Dict-backed gateway for development without a database and for tests."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, UUID], ProgressRecord] = {}

    async def read_progress(
        self, learner_id: str, module_id: UUID
    ) -> ProgressRecord | None:
        return self._records.get((learner_id, module_id))

    async def list_progress(self, learner_id: str) -> list[ProgressRecord]:
        return [r for (lid, _), r in self._records.items() if lid == learner_id]

    async def list_module_progress(self, module_id: UUID) -> list[ProgressRecord]:
        return [r for (_, mid), r in self._records.items() if mid == module_id]

    async def write_progress(
        self, learner_id: str, module_id: UUID, **fields: Any
    ) -> ProgressRecord:
        existing = self._records.get((learner_id, module_id))
        base = existing or ProgressRecord(learner_id=learner_id, module_id=module_id)
        record = base.merge(**fields)
        self._records[(learner_id, module_id)] = record
        return record

    async def delete_learner_progress(self, learner_id: str) -> None:
        for key in [k for k in self._records if k[0] == learner_id]:
            del self._records[key]


# ==============================================================================
# Cassandra Gateway
# ==============================================================================


class CassandraProgressGateway:
    """Gateway over `progress_by_learner` + `progress_by_module`."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.progress_by_learner
            WHERE learner_id = ? AND module_id = ?
        """)

        self._get_learner_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.progress_by_learner
            WHERE learner_id = ?
        """)

        self._get_module_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.progress_by_module
            WHERE module_id = ?
        """)

        self._upsert_progress = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.progress_by_learner
            (learner_id, module_id, video_watched, score, passed, attempts, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._upsert_progress_by_module = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.progress_by_module
            (module_id, learner_id, video_watched, score, passed, attempts, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """)

        self._delete_learner_progress = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.progress_by_learner WHERE learner_id = ?
        """)

        self._delete_progress_by_module = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.progress_by_module
            WHERE module_id = ? AND learner_id = ?
        """)

    async def _read(self, statement: Any, params: list[Any]) -> Any:
        try:
            return await self.session.aexecute(statement, params)
        except Exception as e:
            logger.error(
                "progress_read_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GatewayReadFailure from e

    async def _write(self, statement: Any, params: list[Any]) -> None:
        try:
            await self.session.aexecute(statement, params)
        except Exception as e:
            logger.error(
                "progress_write_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise GatewayWriteFailure from e

    async def read_progress(
        self, learner_id: str, module_id: UUID
    ) -> ProgressRecord | None:
        result = await self._read(self._get_progress, [learner_id, module_id])
        row = result.one()
        return ProgressRecord.from_row(row) if row else None

    async def list_progress(self, learner_id: str) -> list[ProgressRecord]:
        rows = await self._read(self._get_learner_progress, [learner_id])
        return [ProgressRecord.from_row(row) for row in rows]

    async def list_module_progress(self, module_id: UUID) -> list[ProgressRecord]:
        rows = await self._read(self._get_module_progress, [module_id])
        return [ProgressRecord.from_row(row) for row in rows]

    async def write_progress(
        self, learner_id: str, module_id: UUID, **fields: Any
    ) -> ProgressRecord:
        """Merge `fields` over the stored record and write both tables."""
        existing = await self.read_progress(learner_id, module_id)
        base = existing or ProgressRecord(learner_id=learner_id, module_id=module_id)
        record = base.merge(**fields)

        values = [
            record.video_watched,
            record.score,
            record.passed,
            record.attempts,
            record.updated_at,
        ]
        # Dual write: learner view + module lookup
        await self._write(self._upsert_progress, [learner_id, module_id, *values])
        await self._write(
            self._upsert_progress_by_module, [module_id, learner_id, *values]
        )
        return record

    async def delete_learner_progress(self, learner_id: str) -> None:
        """Remove every record of a learner (account deletion only)."""
        records = await self.list_progress(learner_id)
        for record in records:
            await self._write(
                self._delete_progress_by_module, [record.module_id, learner_id]
            )
        await self._write(self._delete_learner_progress, [learner_id])
        logger.info(
            "learner_progress_deleted", learner_id=learner_id, records=len(records)
        )
