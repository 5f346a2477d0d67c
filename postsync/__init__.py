"""postsync - mirror Able blog posts into a GitHub repository."""

from postsync.config import PostsyncConfig, load_config
from postsync.dispatcher import ChangeDispatcher, DispatchResult
from postsync.store import FileStore, GitHubStore, RenameOrchestrator, create_store

__version__ = "0.1.0"

__all__ = [
    "ChangeDispatcher",
    "DispatchResult",
    "FileStore",
    "GitHubStore",
    "PostsyncConfig",
    "RenameOrchestrator",
    "create_store",
    "load_config",
]
