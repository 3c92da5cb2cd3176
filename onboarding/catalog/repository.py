"""Storage for training modules.

`CassandraModuleRepository` is used in deployments; `InMemoryModuleRepository`
backs development runs without a database and the test-suite.
"""

from typing import TYPE_CHECKING, Protocol
from uuid import UUID

import structlog

from onboarding.auth.permissions import StaffRole

from .models import TrainingModule


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class ModuleRepository(Protocol):
    """Catalog persistence contract."""

    async def get(self, module_id: UUID) -> TrainingModule | None: ...

    async def list_by_role(self, role: StaffRole) -> list[TrainingModule]: ...

    async def save(self, module: TrainingModule) -> None: ...

    async def delete(self, module: TrainingModule) -> None: ...


class InMemoryModuleRepository:
    """Dict-backed module storage."""

    def __init__(self, modules: list[TrainingModule] | None = None):
        self._modules: dict[UUID, TrainingModule] = {}
        for module in modules or []:
            self._modules[module.id] = module

    async def get(self, module_id: UUID) -> TrainingModule | None:
        return self._modules.get(module_id)

    async def list_by_role(self, role: StaffRole) -> list[TrainingModule]:
        modules = [m for m in self._modules.values() if m.role == role]
        return sorted(modules, key=lambda m: (m.ordinal, str(m.id)))

    async def save(self, module: TrainingModule) -> None:
        self._modules[module.id] = module

    async def delete(self, module: TrainingModule) -> None:
        self._modules.pop(module.id, None)


class CassandraModuleRepository:
    """Module storage over `training_modules` + `modules_by_role`."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_module = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.training_modules WHERE id = ?
        """)

        self._upsert_module = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.training_modules
            (id, title, description, role, category, folder, video_url,
             transcript, questions, ordinal, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._delete_module = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.training_modules WHERE id = ?
        """)

        self._get_role_modules = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.modules_by_role WHERE role = ?
        """)

        self._insert_role_module = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.modules_by_role (role, ordinal, module_id)
            VALUES (?, ?, ?)
        """)

        self._delete_role_module = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.modules_by_role
            WHERE role = ? AND ordinal = ? AND module_id = ?
        """)

    async def get(self, module_id: UUID) -> TrainingModule | None:
        result = await self.session.aexecute(self._get_module, [module_id])
        row = result.one()
        return TrainingModule.from_row(row) if row else None

    async def list_by_role(self, role: StaffRole) -> list[TrainingModule]:
        """Get a role's modules in clustering (ordinal) order."""
        rows = await self.session.aexecute(self._get_role_modules, [role.value])

        modules = []
        for row in rows:
            module = await self.get(row.module_id)
            if module is None:
                logger.warning(
                    "dangling_curriculum_entry",
                    role=role.value,
                    module_id=str(row.module_id),
                )
                continue
            modules.append(module)
        return modules

    async def save(self, module: TrainingModule) -> None:
        """Upsert a module, moving its curriculum entry if the ordinal changed."""
        existing = await self.get(module.id)
        if existing and existing.ordinal != module.ordinal:
            await self.session.aexecute(
                self._delete_role_module,
                [existing.role.value, existing.ordinal, existing.id],
            )

        # Dual write: main table + curriculum order
        await self.session.aexecute(
            self._upsert_module,
            [
                module.id,
                module.title,
                module.description,
                module.role.value,
                module.category.value,
                module.folder,
                module.video_url,
                module.transcript,
                module.questions_json(),
                module.ordinal,
                module.created_at,
            ],
        )
        await self.session.aexecute(
            self._insert_role_module,
            [module.role.value, module.ordinal, module.id],
        )

    async def delete(self, module: TrainingModule) -> None:
        await self.session.aexecute(
            self._delete_role_module,
            [module.role.value, module.ordinal, module.id],
        )
        await self.session.aexecute(self._delete_module, [module.id])
