"""Remote file store for postsync."""

from postsync.config.loader import resolve_secret
from postsync.config.models import GitHubConfig
from postsync.store.base import FileStore
from postsync.store.github import GitHubStore
from postsync.store.models import (
    CommitRef,
    PendingBranch,
    PendingTransaction,
    PostReference,
    PullRequestRef,
)
from postsync.store.orchestrator import RenameOrchestrator


def create_store(config: GitHubConfig) -> FileStore:
    """Create a file store from config.

    Resolves the token from the environment variable named in config.token_env.
    """
    token = resolve_secret(config.token_env)
    return GitHubStore(config=config, token=token)


__all__ = [
    "CommitRef",
    "FileStore",
    "GitHubStore",
    "PendingBranch",
    "PendingTransaction",
    "PostReference",
    "PullRequestRef",
    "RenameOrchestrator",
    "create_store",
]
