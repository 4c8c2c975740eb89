from dataclasses import dataclass

from prwarden.events.event import Event


@dataclass(frozen=True)
class ReviewJob:
    owner: str
    repo: str
    number: int
    record_id: int


class ReviewRequested(Event):
    """An admitted review record is ready to be run."""

    def __init__(self, job: ReviewJob):
        super().__init__(job)

    def __str__(self):
        job = self.data
        return f"ReviewRequested: {job.owner}/{job.repo}#{job.number} (record {job.record_id})"
