"""Pydantic models for file-store data."""

from pydantic import BaseModel, Field


class PostReference(BaseModel):
    """An existing post file in the content directory."""

    path: str = Field(description="Repository-relative path")
    name: str = Field(description="File name relative to the content directory")
    sha: str = Field(description="Current content version token")


class CommitRef(BaseModel):
    """The commit produced by a single-file write."""

    sha: str
    parent_sha: str | None = None


class PendingBranch(BaseModel):
    """Short-lived branch staging a multi-file change."""

    head_ref: str
    base_ref: str
    base_sha: str = Field(description="Tip of base_ref when the branch was created")


class PullRequestRef(BaseModel):
    id: int
    head_sha: str


class PendingTransaction(BaseModel):
    """An in-flight rename. Lives in process memory only."""

    pull_request_id: int
    head_sha: str
    head_ref: str
