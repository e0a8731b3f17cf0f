"""Deduplication guard for scheduled task instances.

Filters candidate (activity, date) pairs against the instances already
stored for the same period. Keys compare by calendar day only, so a row
stored as ``2025-03-10T12:00:00+00:00`` blocks a ``2025-03-10`` candidate.

There is no locking: two concurrent runs that both read the stored set
before either writes can still insert the same pair twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from src.bitacora.database.models import TaskInstance, as_calendar_date
from src.bitacora.database.repository import TaskInstanceRepository
from src.bitacora.database.store import RelationalStore

logger = logging.getLogger(__name__)

InstanceKey = tuple[str, date]


def instance_key(activity_id: int | str, scheduled: date | str) -> InstanceKey:
    return (str(activity_id), as_calendar_date(scheduled))


def filter_new(
    candidates: Iterable[TaskInstance],
    existing: set[InstanceKey],
) -> list[TaskInstance]:
    """Candidates whose key is neither stored nor repeated earlier in the batch.

    Candidates are visited in ascending date order; the first of any
    repeated key wins.
    """
    seen = set(existing)
    fresh: list[TaskInstance] = []
    for candidate in sorted(candidates, key=lambda c: (c.scheduled_date, str(c.activity_id))):
        key = instance_key(candidate.activity_id, candidate.scheduled_date)
        if key in seen:
            continue
        seen.add(key)
        fresh.append(candidate)
    return fresh


@dataclass
class DeduplicationGuard:
    """Reads stored instance keys for a period and drops known candidates."""

    store: RelationalStore

    def existing_keys(
        self,
        start: date,
        end: date,
        activity_ids: Iterable[int | str] | None = None,
    ) -> set[InstanceKey]:
        instances = TaskInstanceRepository(self.store).list_between(start, end, activity_ids)
        return {instance_key(i.activity_id, i.scheduled_date) for i in instances}

    def filter(self, candidates: Sequence[TaskInstance]) -> list[TaskInstance]:
        """Subset of ``candidates`` that is safe to insert.

        Only the candidates' activities are read, over the span of the
        candidates' dates.

        Raises:
            StoreError: if the stored instances cannot be read.
        """
        if not candidates:
            return []
        dates = [c.scheduled_date for c in candidates]
        activity_ids = {c.activity_id for c in candidates}
        existing = self.existing_keys(min(dates), max(dates), activity_ids)
        fresh = filter_new(candidates, existing)
        if len(fresh) < len(candidates):
            logger.info(
                "Dropped %d duplicate candidates (%d remain)",
                len(candidates) - len(fresh), len(fresh),
            )
        return fresh
