"""Abstract file-store interface for postsync."""

from abc import ABC, abstractmethod

from postsync.store.models import CommitRef, PendingBranch, PostReference, PullRequestRef


class FileStore(ABC):
    """Abstract base class for remote file stores.

    Scoped to one repository, one base branch and one content directory.
    Every mutating call takes the caller's version token and fails with
    StaleVersion instead of overwriting newer content. ``branch=None``
    means the base branch.
    """

    base_branch: str

    @abstractmethod
    async def find_by_external_id(self, external_id: str) -> PostReference | None:
        """Return the post whose file name embeds external_id, or None."""
        ...

    @abstractmethod
    async def create(
        self, name: str, content: str, message: str, branch: str | None = None
    ) -> CommitRef:
        """Create a file. Raises Conflict if it already exists on that branch."""
        ...

    @abstractmethod
    async def update(
        self, name: str, content: str, sha: str, message: str, branch: str | None = None
    ) -> CommitRef:
        """Replace a file's content. Raises StaleVersion on sha mismatch."""
        ...

    @abstractmethod
    async def delete(
        self, name: str, sha: str, message: str, branch: str | None = None
    ) -> CommitRef:
        """Delete a file. Raises StaleVersion on sha mismatch."""
        ...

    @abstractmethod
    async def create_branch(self, from_branch: str | None = None) -> PendingBranch:
        """Create a uniquely named branch at the tip of from_branch."""
        ...

    @abstractmethod
    async def open_pull_request(self, title: str, base: str, head: str) -> PullRequestRef:
        """Open a pull request merging head into base."""
        ...

    @abstractmethod
    async def merge_pull_request(
        self, pull_request_id: int, commit_title: str, expected_head_sha: str
    ) -> None:
        """Squash-merge a pull request.

        Raises StaleVersion if the live head no longer matches
        expected_head_sha.
        """
        ...

    @abstractmethod
    async def delete_branch(self, head_ref: str) -> None:
        """Remove a staging branch."""
        ...
