"""
Paddocks component - paddock create/update/delete per stable.
"""

from .component import normalize_horse_names, run, run_delete, run_upsert
from .models import DeletePaddockInput, PaddockOutput, UpsertPaddockInput

__all__ = [
    "run",
    "run_delete",
    "run_upsert",
    "DeletePaddockInput",
    "UpsertPaddockInput",
    "PaddockOutput",
    "normalize_horse_names",
]
