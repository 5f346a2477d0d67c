"""GitHub file store using PyGithub."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from functools import cached_property
from typing import TypeVar

import requests
from github import Auth, Github, GithubException
from github.Repository import Repository

from postsync.config.models import GitHubConfig
from postsync.errors import Conflict, StaleVersion, StoreError, TransientIOError
from postsync.posts.naming import external_id_from_name
from postsync.store.base import FileStore
from postsync.store.models import CommitRef, PendingBranch, PostReference, PullRequestRef

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GitHubStore(FileStore):
    """GitHub implementation of FileStore using PyGithub.

    PyGithub is synchronous, so all blocking calls are wrapped
    with asyncio.to_thread() to avoid blocking the event loop.
    """

    def __init__(self, config: GitHubConfig, token: str) -> None:
        if not token:
            raise ValueError("GitHub token required.")
        if not config.repo:
            raise ValueError("GitHub repository required (github.repo: owner/repo).")
        self.config = config
        self.base_branch = config.base_branch
        self._token = token

    @cached_property
    def _client(self) -> Github:
        auth = Auth.Token(self._token)
        # Retries are the webhook sender's job, not ours.
        return Github(auth=auth, timeout=self.config.timeout, retry=None)

    @cached_property
    def _repo(self) -> Repository:
        return self._client.get_repo(self.config.repo)

    def _path(self, name: str) -> str:
        if not self.config.content_path:
            return name
        return f"{self.config.content_path}/{name}"

    async def _run(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(fn)
        except (GithubException, requests.RequestException) as e:
            raise _store_error(operation, e) from e

    async def find_by_external_id(self, external_id: str) -> PostReference | None:
        """List the content directory on the base branch and match by file name."""

        def _sync() -> PostReference | None:
            try:
                contents = self._repo.get_contents(
                    self.config.content_path, ref=self.base_branch
                )
            except GithubException as e:
                if e.status == 404:
                    logger.debug("content directory %s not found", self.config.content_path)
                    return None
                raise
            # get_contents returns a single item for files, list for dirs
            if not isinstance(contents, list):
                contents = [contents]
            for c in contents:
                if c.type == "file" and external_id_from_name(c.name) == external_id:
                    return PostReference(path=c.path, name=c.name, sha=c.sha)
            return None

        return await self._run("find_by_external_id", _sync)

    async def create(
        self, name: str, content: str, message: str, branch: str | None = None
    ) -> CommitRef:
        branch = branch or self.base_branch
        logger.debug("create %s on %s", name, branch)
        result = await self._run(
            "create",
            lambda: self._repo.create_file(self._path(name), message, content, branch=branch),
        )
        return _commit_ref(result["commit"])

    async def update(
        self, name: str, content: str, sha: str, message: str, branch: str | None = None
    ) -> CommitRef:
        branch = branch or self.base_branch
        logger.debug("update %s on %s (sha %s)", name, branch, sha[:8])
        result = await self._run(
            "update",
            lambda: self._repo.update_file(
                self._path(name), message, content, sha, branch=branch
            ),
        )
        return _commit_ref(result["commit"])

    async def delete(
        self, name: str, sha: str, message: str, branch: str | None = None
    ) -> CommitRef:
        branch = branch or self.base_branch
        logger.debug("delete %s on %s (sha %s)", name, branch, sha[:8])
        result = await self._run(
            "delete",
            lambda: self._repo.delete_file(self._path(name), message, sha, branch=branch),
        )
        return _commit_ref(result["commit"])

    async def create_branch(self, from_branch: str | None = None) -> PendingBranch:
        """Create ``<branch_prefix>/<random hex>`` at the tip of from_branch."""
        base_ref = from_branch or self.base_branch
        head_ref = f"{self.config.branch_prefix}/{uuid.uuid4().hex}"

        def _sync() -> PendingBranch:
            base_sha = self._repo.get_branch(base_ref).commit.sha
            self._repo.create_git_ref(ref=f"refs/heads/{head_ref}", sha=base_sha)
            return PendingBranch(head_ref=head_ref, base_ref=base_ref, base_sha=base_sha)

        branch = await self._run("create_branch", _sync)
        logger.debug("created branch %s at %s", head_ref, branch.base_sha[:8])
        return branch

    async def open_pull_request(self, title: str, base: str, head: str) -> PullRequestRef:
        def _sync() -> PullRequestRef:
            pr = self._repo.create_pull(base=base, head=head, title=title, body="")
            return PullRequestRef(id=pr.number, head_sha=pr.head.sha)

        return await self._run("open_pull_request", _sync)

    async def merge_pull_request(
        self, pull_request_id: int, commit_title: str, expected_head_sha: str
    ) -> None:
        def _sync() -> None:
            pr = self._repo.get_pull(pull_request_id)
            status = pr.merge(
                commit_title=commit_title,
                merge_method="squash",
                sha=expected_head_sha,
            )
            if not status.merged:
                raise StaleVersion("merge_pull_request", detail=status.message or "not merged")

        await self._run("merge_pull_request", _sync)
        logger.debug("merged pull request #%d", pull_request_id)

    async def delete_branch(self, head_ref: str) -> None:
        await self._run(
            "delete_branch",
            lambda: self._repo.get_git_ref(f"heads/{head_ref}").delete(),
        )


def _commit_ref(commit) -> CommitRef:
    """Convert a PyGithub Commit from a contents API response."""
    parents = commit.parents
    return CommitRef(sha=commit.sha, parent_sha=parents[0].sha if parents else None)


def _github_message(exc: GithubException) -> str:
    data = exc.data
    if isinstance(data, dict):
        return str(data.get("message", ""))
    return str(data or "")


def _store_error(operation: str, exc: Exception) -> StoreError:
    """Map a PyGithub / requests failure onto the store error taxonomy."""
    if isinstance(exc, GithubException):
        message = _github_message(exc)
        if exc.status == 409:
            return StaleVersion(operation, exc, message)
        if exc.status == 422 and operation == "create":
            # GitHub answers '"sha" wasn't supplied' when the path exists.
            return Conflict(operation, exc, message)
        if exc.status == 422 and "sha" in message.lower():
            return StaleVersion(operation, exc, message)
        if exc.status == 405 and operation == "merge_pull_request":
            return StaleVersion(operation, exc, message)
    return TransientIOError(operation, exc)
