"""Write counters and the run summary returned to callers."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SAMPLE_ERRORS = 3


class WriteResult(BaseModel):
    """Counters accumulated by a writer. Errors never abort the run."""

    created: int = 0
    updated: int = 0
    upserted: int = 0
    errors: list[str] = Field(default_factory=list)


class SyncSummary(BaseModel):
    """Summary of one completed run, serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool = True
    started_at: str
    finished_at: str
    since: str
    cin7_count: int = 0
    prepared: int = 0
    created: int = 0
    updated: int = 0
    upserted: int = 0
    skipped: int = 0
    errors_count: int = 0
    sample_errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_run(
        cls,
        *,
        started_at: str,
        finished_at: str,
        since: str,
        fetched: int,
        prepared: int,
        skipped: int,
        result: WriteResult,
        sample_size: int = SAMPLE_ERRORS,
    ) -> "SyncSummary":
        return cls(
            started_at=started_at,
            finished_at=finished_at,
            since=since,
            cin7_count=fetched,
            prepared=prepared,
            created=result.created,
            updated=result.updated,
            upserted=result.upserted,
            skipped=skipped,
            errors_count=len(result.errors),
            sample_errors=result.errors[:sample_size],
        )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class FailedRun(BaseModel):
    """Minimal summary for a run that aborted on a fatal error."""

    ok: bool = False
    error: str

    def to_json(self) -> dict:
        return self.model_dump(mode="json")
