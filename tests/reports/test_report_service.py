"""Tests for admin progress reports."""

from uuid import uuid4

import pytest
import pytest_asyncio

from onboarding.auth.permissions import AdminScope, StaffRole
from onboarding.catalog.repository import InMemoryModuleRepository
from onboarding.catalog.service import CatalogService
from onboarding.progress.gateway import InMemoryProgressGateway
from onboarding.progress.models import ProgressRecord
from onboarding.reports.service import ReportService, completion_stats


def passed(module_id, learner_id="ana@school.org") -> ProgressRecord:
    return ProgressRecord(learner_id=learner_id, module_id=module_id, passed=True)


class TestCompletionStats:
    """Tests for completion_stats."""

    def test_no_modules(self):
        """Roles without modules report 'No Modules'."""
        stats = completion_stats([], [])
        assert stats.percent == 0
        assert stats.label == "No Modules"
        assert stats.certified is False

    def test_partial_progress(self, make_module):
        """Percent is the rounded passed share."""
        modules = [make_module(ordinal=i) for i in range(3)]

        stats = completion_stats(modules, [passed(modules[0].id)])

        assert stats.passed_count == 1
        assert stats.percent == 33
        assert stats.label == "1/3 Completed"
        assert stats.certified is False

    def test_half_rounds_up(self, make_module):
        """1 of 8 is 12.5%, shown as 13%."""
        modules = [make_module(ordinal=i) for i in range(8)]
        assert completion_stats(modules, [passed(modules[0].id)]).percent == 13

    def test_unpassed_and_foreign_records_ignored(self, make_module):
        """Only passed records of the role's current modules count."""
        modules = [make_module(ordinal=i) for i in range(2)]
        records = [
            ProgressRecord(
                learner_id="ana@school.org",
                module_id=modules[0].id,
                video_watched=True,
                attempts=2,
            ),
            passed(uuid4()),
        ]
        assert completion_stats(modules, records).passed_count == 0

    def test_certified(self, make_module):
        """All modules passed is certified."""
        modules = [make_module(ordinal=i) for i in range(2)]
        stats = completion_stats(modules, [passed(m.id) for m in modules])
        assert stats.percent == 100
        assert stats.label == "2/2 Completed"
        assert stats.certified is True


@pytest.fixture
def curriculum(make_module):
    return {
        StaffRole.TEACHER: [make_module(ordinal=i) for i in range(2)],
        StaffRole.SECURITY: [
            make_module(ordinal=0, role=StaffRole.SECURITY),
        ],
    }


@pytest_asyncio.fixture
async def reports(curriculum) -> ReportService:
    modules = [m for ms in curriculum.values() for m in ms]
    gateway = InMemoryProgressGateway()
    teacher_modules = curriculum[StaffRole.TEACHER]
    guard_module = curriculum[StaffRole.SECURITY][0]
    await gateway.write_progress("ana@school.org", teacher_modules[0].id, passed=True)
    await gateway.write_progress(
        "bo@school.org", teacher_modules[1].id, video_watched=True
    )
    await gateway.write_progress("gus@school.org", guard_module.id, passed=True)
    return ReportService(CatalogService(InMemoryModuleRepository(modules)), gateway)


class TestReportService:
    """Tests for ReportService."""

    @pytest.mark.asyncio
    async def test_hr_sees_every_role(self, reports):
        """HR reports on all learners."""
        rows = await reports.progress_report(AdminScope.ALL)

        by_learner = {r.learner_id: r for r in rows}
        assert set(by_learner) == {"ana@school.org", "bo@school.org", "gus@school.org"}
        assert by_learner["ana@school.org"].stats.label == "1/2 Completed"
        assert by_learner["bo@school.org"].stats.percent == 0
        assert by_learner["gus@school.org"].stats.certified is True

    @pytest.mark.asyncio
    async def test_department_head_sees_own_role(self, reports):
        """A department head only sees their own role."""
        rows = await reports.progress_report(AdminScope.SECURITY)
        assert [r.learner_id for r in rows] == ["gus@school.org"]

    @pytest.mark.asyncio
    async def test_role_outside_scope_is_empty(self, reports):
        """Asking for another role yields nothing."""
        rows = await reports.progress_report(AdminScope.SECURITY, StaffRole.TEACHER)
        assert rows == []

    @pytest.mark.asyncio
    async def test_search(self, reports):
        """Search filters on the learner id."""
        rows = await reports.progress_report(AdminScope.ALL, search="BO@")
        assert [r.learner_id for r in rows] == ["bo@school.org"]

    @pytest.mark.asyncio
    async def test_module_pass_counts(self, reports, curriculum):
        """Pass counts per module."""
        teacher_modules = curriculum[StaffRole.TEACHER]
        counts = await reports.module_pass_counts(StaffRole.TEACHER)
        assert counts == {teacher_modules[0].id: 1, teacher_modules[1].id: 0}
