"""Staff progress reporting for administrators.

A learner's overall progress is the share of their role's modules they have
passed. Learners are discovered through the progress rows of the role's
modules; staff accounts themselves live in the external login service.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

import structlog

from onboarding.auth.permissions import AdminScope, StaffRole, visible_roles
from onboarding.catalog.models import TrainingModule
from onboarding.catalog.service import CatalogService
from onboarding.progress.gateway import ProgressGateway
from onboarding.progress.models import ProgressRecord
from onboarding.quiz.session import round_half_up


logger = structlog.get_logger(__name__)

NO_MODULES_LABEL = "No Modules"


@dataclass(frozen=True)
class CompletionStats:
    """Overall progress of one learner on their role's curriculum."""

    passed_count: int
    total: int
    percent: int
    label: str

    @property
    def certified(self) -> bool:
        return self.total > 0 and self.passed_count == self.total


@dataclass(frozen=True)
class LearnerReport:
    learner_id: str
    role: StaffRole
    stats: CompletionStats


def completion_stats(
    modules: list[TrainingModule],
    records: Iterable[ProgressRecord],
) -> CompletionStats:
    """Summarize one learner's records against their role's modules.

    Records of modules outside `modules` (other roles, deleted modules) are
    ignored.

    Examples:
        >>> completion_stats([], []).label
        'No Modules'
    """
    if not modules:
        return CompletionStats(
            passed_count=0, total=0, percent=0, label=NO_MODULES_LABEL
        )

    module_ids = {m.id for m in modules}
    passed = {r.module_id for r in records if r.passed and r.module_id in module_ids}
    total = len(modules)
    return CompletionStats(
        passed_count=len(passed),
        total=total,
        percent=round_half_up(len(passed) / total * 100),
        label=f"{len(passed)}/{total} Completed",
    )


class ReportService:
    """Builds the staff progress table shown on the admin dashboard."""

    def __init__(self, catalog: CatalogService, gateway: ProgressGateway):
        self.catalog = catalog
        self.gateway = gateway

    async def role_report(
        self, role: StaffRole, search: str | None = None
    ) -> list[LearnerReport]:
        """Report every learner with progress on `role`'s modules.

        Args:
            role: Curriculum to report on
            search: Case-insensitive filter on the learner id
        """
        modules = await self.catalog.list_modules(role)

        by_learner: dict[str, list[ProgressRecord]] = {}
        for module in modules:
            for record in await self.gateway.list_module_progress(module.id):
                by_learner.setdefault(record.learner_id, []).append(record)

        needle = search.lower() if search else None
        reports = [
            LearnerReport(
                learner_id=learner_id,
                role=role,
                stats=completion_stats(modules, records),
            )
            for learner_id, records in sorted(by_learner.items())
            if needle is None or needle in learner_id.lower()
        ]
        return reports

    async def progress_report(
        self,
        scope: AdminScope,
        role: StaffRole | None = None,
        search: str | None = None,
    ) -> list[LearnerReport]:
        """Report on every role the admin scope can see (or just `role`).

        Roles outside the scope are silently left out.
        """
        roles = visible_roles(scope)
        if role is not None:
            roles = [r for r in roles if r == role]

        reports: list[LearnerReport] = []
        for r in roles:
            # Admin accounts are not learners
            if r == StaffRole.ADMIN:
                continue
            reports.extend(await self.role_report(r, search))

        logger.info(
            "progress_report_built",
            scope=scope.value,
            roles=[r.value for r in roles],
            learners=len(reports),
        )
        return reports

    async def module_pass_counts(self, role: StaffRole) -> dict[UUID, int]:
        """Number of learners who passed each of `role`'s modules."""
        counts: dict[UUID, int] = {}
        for module in await self.catalog.list_modules(role):
            records = await self.gateway.list_module_progress(module.id)
            counts[module.id] = sum(1 for r in records if r.passed)
        return counts
