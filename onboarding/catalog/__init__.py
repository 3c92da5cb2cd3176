"""Training module catalog.

Provides:
- Per-role curriculum with explicit, stable ordinals
- Embedded quiz questions validated at authoring time
- Module folders and categories
"""

from .models import CATALOG_TABLES_CQL, ModuleCategory, Question, TrainingModule


__all__ = [
    "CATALOG_TABLES_CQL",
    "ModuleCategory",
    "Question",
    "TrainingModule",
]
