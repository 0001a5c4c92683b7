"""In-memory job history and per-client settings.

State lives for the life of the process. Every method runs on the event
loop without awaiting, so no locking is needed. The job store keeps at
most ``settings.job_retention_limit`` records and evicts the oldest first.
"""

import uuid
from collections import Counter
from typing import Optional

from config import settings
from schemas import (
    ActivityEntry,
    AdminStats,
    ClientSummary,
    Job,
    UserSettings,
    UserSettingsUpdate,
)
from utils.metrics import JOBS_TOTAL


class JobStore:
    def __init__(self, retention_limit: int | None = None):
        self._jobs: dict[str, Job] = {}
        self._retention_limit = retention_limit

    @property
    def retention_limit(self) -> int:
        return self._retention_limit or settings.job_retention_limit

    def create(self, client_id: str, job_type: str, input_name: str, original_size: int) -> Job:
        job = Job(
            job_id=str(uuid.uuid4()),
            client_id=client_id,
            type=job_type,
            input_name=input_name,
            original_size=original_size,
        )
        self._jobs[job.job_id] = job
        self._evict()
        return job

    def complete(self, job: Job, output_name: str, output_path: str, compressed_size: int) -> Job:
        job.status = "completed"
        job.output_name = output_name
        job.output_path = output_path
        job.compressed_size = compressed_size
        JOBS_TOTAL.labels(type=job.type, status=job.status).inc()
        return job

    def fail(self, job: Job) -> Job:
        job.status = "failed"
        JOBS_TOTAL.labels(type=job.type, status=job.status).inc()
        return job

    def get(self, job_id: str, client_id: str) -> Optional[Job]:
        """Return the job only if it belongs to client_id."""
        job = self._jobs.get(job_id)
        if job is None or job.client_id != client_id:
            return None
        return job

    def for_client(self, client_id: str, limit: int | None = None) -> list[Job]:
        """Jobs for one client, newest first."""
        jobs = [j for j in reversed(self._jobs.values()) if j.client_id == client_id]
        return jobs[:limit] if limit else jobs

    def clear(self, client_id: str) -> int:
        doomed = [k for k, j in self._jobs.items() if j.client_id == client_id]
        for key in doomed:
            del self._jobs[key]
        return len(doomed)

    def recent(self, limit: int) -> list[Job]:
        # Insertion order is creation order
        return list(reversed(self._jobs.values()))[:limit]

    def stats(self) -> AdminStats:
        jobs = list(self._jobs.values())
        done = [j for j in jobs if j.compressed_size is not None]
        return AdminStats(
            total_clients=len({j.client_id for j in jobs}),
            total_files_processed=len(jobs),
            total_storage_used=sum(j.compressed_size for j in done),
            total_bytes_saved=sum(max(0, j.original_size - j.compressed_size) for j in done),
            jobs_by_type=dict(Counter(j.type for j in jobs)),
        )

    def activity(self, limit: int) -> list[ActivityEntry]:
        return [
            ActivityEntry(
                type=j.type,
                client_id=j.client_id,
                file_name=j.input_name,
                status=j.status,
                timestamp=j.created_at,
            )
            for j in self.recent(limit)
        ]

    def clients(self, limit: int) -> list[ClientSummary]:
        """Per-client job counts, most recently active first."""
        summaries: dict[str, ClientSummary] = {}
        for job in reversed(self._jobs.values()):
            summary = summaries.get(job.client_id)
            if summary is None:
                summary = summaries[job.client_id] = ClientSummary(
                    client_id=job.client_id,
                    files_processed=0,
                    last_activity=job.created_at,
                )
            summary.files_processed += 1
        return list(summaries.values())[:limit]

    def reset(self) -> None:
        self._jobs.clear()

    def _evict(self) -> None:
        # dicts keep insertion order, so the first key is the oldest job
        while len(self._jobs) > self.retention_limit:
            del self._jobs[next(iter(self._jobs))]


class SettingsStore:
    def __init__(self):
        self._settings: dict[str, UserSettings] = {}

    def get(self, client_id: str) -> UserSettings:
        return self._settings.get(client_id) or UserSettings()

    def update(self, client_id: str, update: UserSettingsUpdate) -> UserSettings:
        current = self.get(client_id)
        merged = current.model_copy(update=update.model_dump(exclude_none=True))
        self._settings[client_id] = merged
        return merged

    def delete(self, client_id: str) -> None:
        self._settings.pop(client_id, None)

    def reset(self) -> None:
        self._settings.clear()


# Module-level singletons
job_store = JobStore()
settings_store = SettingsStore()
