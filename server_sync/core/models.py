"""Domain models for a synchronization run."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Context(BaseModel):
    """A named subtree of the repository materialized into the destination."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Context name")
    source_root: Path = Field(..., description="{repo_storage}/contexts/{name}")

    @classmethod
    def under(cls, repo_storage: Path, name: str) -> Context:
        return cls(name=name, source_root=repo_storage / "contexts" / name)


class Identity(BaseModel):
    """Resolved owner and group applied to everything the run writes."""

    model_config = ConfigDict(frozen=True)

    uid: int = Field(..., ge=0)
    gid: int = Field(..., ge=0)


class Settings(BaseModel):
    """Read-only settings snapshot shared by every component of a run."""

    model_config = ConfigDict(frozen=True)

    destination_root: Path = Field(..., description="Root of every write")
    repo_storage: Path = Field(..., description="Local checkout path")
    repo_url: str | None = Field(default=None, description="Remote URL")
    repo_branch: str = Field(default="master", description="Branch to check out")
    contexts: tuple[Context, ...] = Field(..., min_length=1)
    variables: dict[str, str] = Field(default_factory=dict)
    owner_spec: str = Field(..., description="Numeric uid or account name")
    group_spec: str | None = Field(default=None, description="Numeric gid or group")
    identity: Identity


class FileRecord(BaseModel):
    """A traversed source file on its way to the destination."""

    model_config = ConfigDict(frozen=True)

    context: Context
    relative_path: Path
    absolute_source: Path
    absolute_destination: Path
    source_bytes: bytes
    text: str | None = Field(default=None, description="Source decoded as UTF-8")

    @property
    def is_text(self) -> bool:
        return self.text is not None


class Outcome(str, Enum):
    """What the reconciler did with one destination file."""

    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"


class FileFailure(BaseModel):
    path: Path
    context: str
    error: str


class SyncReport(BaseModel):
    """Aggregated result of processing every context."""

    contexts: list[str] = Field(default_factory=list)
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    failures: list[FileFailure] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def exit_code(self) -> int:
        return 1 if self.failures else 0

    def record(self, outcome: Outcome) -> None:
        if outcome is Outcome.CREATED:
            self.created += 1
        elif outcome is Outcome.UPDATED:
            self.updated += 1
        else:
            self.unchanged += 1

    def summary(self) -> str:
        return (
            f"{self.created} created, {self.updated} updated, "
            f"{self.unchanged} unchanged, {self.failed} failed"
        )
