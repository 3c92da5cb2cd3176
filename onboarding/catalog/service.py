"""Training module catalog service layer.

Business logic for:
- Listing a role's curriculum in ordinal order
- Adding modules at the end of a curriculum
- Deleting and reordering modules
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4

import structlog

from onboarding.auth.permissions import StaffRole

from .models import TrainingModule
from .repository import ModuleRepository
from .schemas import CreateModuleRequest


logger = structlog.get_logger(__name__)

DEFAULT_FOLDER = "DEF Guidelines"


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CatalogError(Exception):
    """Base catalog error."""

    def __init__(self, message: str, code: str = "catalog_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class ModuleNotFoundError(CatalogError):
    """Module not found."""

    def __init__(self, message: str = "Training module not found"):
        super().__init__(message, "module_not_found")


class InvalidReorderError(CatalogError):
    """Reorder list does not match the role's current modules."""

    def __init__(self, message: str = "Module list does not match the curriculum"):
        super().__init__(message, "invalid_reorder")


# ==============================================================================
# Catalog Service
# ==============================================================================


class CatalogService:
    """Service for the per-role training curriculum."""

    def __init__(self, repository: ModuleRepository):
        self.repository = repository

    async def list_modules(self, role: StaffRole) -> list[TrainingModule]:
        """Get a role's modules in stable ordinal order."""
        modules = await self.repository.list_by_role(role)
        return sorted(modules, key=lambda m: (m.ordinal, str(m.id)))

    async def get_module(self, module_id: UUID) -> TrainingModule:
        """Get a module by id.

        Raises:
            ModuleNotFoundError: If the module does not exist
        """
        module = await self.repository.get(module_id)
        if module is None:
            raise ModuleNotFoundError
        return module

    async def create_module(self, data: CreateModuleRequest) -> TrainingModule:
        """Append a module to the end of its role's curriculum."""
        existing = await self.list_modules(data.role)
        ordinal = existing[-1].ordinal + 1 if existing else 0

        module = TrainingModule(
            id=uuid4(),
            title=data.title,
            description=data.description,
            role=data.role,
            category=data.category,
            folder=data.folder,
            video_url=data.video_url,
            transcript=data.transcript,
            questions=tuple(q.to_entity() for q in data.questions),
            ordinal=ordinal,
            created_at=datetime.now(UTC),
        )
        await self.repository.save(module)

        if not module.is_quiz_configured:
            logger.warning(
                "module_created_without_questions",
                module_id=str(module.id),
                role=module.role.value,
            )

        logger.info(
            "module_created",
            module_id=str(module.id),
            role=module.role.value,
            ordinal=ordinal,
            questions=len(module.questions),
        )
        return module

    async def delete_module(self, module_id: UUID) -> TrainingModule:
        """Remove a module from the catalog.

        Progress records that reference the module are left untouched.
        """
        module = await self.get_module(module_id)
        await self.repository.delete(module)
        logger.info(
            "module_deleted",
            module_id=str(module_id),
            role=module.role.value,
        )
        return module

    async def reorder_modules(
        self, role: StaffRole, module_ids: list[UUID]
    ) -> list[TrainingModule]:
        """Rewrite a role's ordinals to follow `module_ids` (0..n-1)."""
        current = await self.list_modules(role)
        by_id = {m.id: m for m in current}

        if len(module_ids) != len(by_id) or set(module_ids) != set(by_id):
            raise InvalidReorderError

        reordered = []
        for ordinal, module_id in enumerate(module_ids):
            module = by_id[module_id].with_ordinal(ordinal)
            await self.repository.save(module)
            reordered.append(module)

        logger.info("modules_reordered", role=role.value, count=len(reordered))
        return reordered

