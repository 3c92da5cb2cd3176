"""Admin progress reports."""

from .service import CompletionStats, ReportService, completion_stats


__all__ = ["CompletionStats", "ReportService", "completion_stats"]
