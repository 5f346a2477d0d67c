"""Shared test fixtures for postsync."""

from __future__ import annotations

import asyncio
import hashlib
import itertools
import uuid
from dataclasses import dataclass, field

import pytest

from postsync.config.models import GitHubConfig, PostsyncConfig
from postsync.errors import Conflict, StaleVersion, TransientIOError
from postsync.posts.naming import external_id_from_name
from postsync.store.base import FileStore
from postsync.store.models import CommitRef, PendingBranch, PostReference, PullRequestRef


@dataclass
class _Branch:
    head: str
    files: dict[str, tuple[str, str]]  # name -> (sha, content)
    fork_files: dict[str, tuple[str, str]] = field(default_factory=dict)


class InMemoryFileStore(FileStore):
    """FileStore double with branches, per-file shas, pull requests and squash merges.

    ``fail`` maps an operation name to an exception raised on its next call.
    Every call yields to the event loop first so concurrent calls interleave.
    """

    def __init__(self, base_branch: str = "master", content_path: str = "content/blog"):
        self.base_branch = base_branch
        self.content_path = content_path
        self._seq = itertools.count(1)
        self.commits: dict[str, list[str]] = {}  # branch -> commit messages
        self.branches: dict[str, _Branch] = {base_branch: _Branch(head="root", files={})}
        self.commits[base_branch] = []
        self.pulls: dict[int, dict] = {}
        self.calls: list[tuple] = []
        self.fail: dict[str, Exception] = {}

    # -- test helpers -------------------------------------------------

    def seed(self, name: str, content: str, branch: str | None = None) -> str:
        """Put a file on a branch without recording a commit. Returns its sha."""
        sha = self._file_sha(content)
        self.branches[branch or self.base_branch].files[name] = (sha, content)
        return sha

    def files(self, branch: str | None = None) -> dict[str, str]:
        b = self.branches[branch or self.base_branch]
        return {name: content for name, (_, content) in b.files.items()}

    def base_commits(self) -> list[str]:
        return self.commits[self.base_branch]

    def push_foreign_commit(self, branch: str, name: str, content: str) -> None:
        """Simulate another writer pushing to a branch."""
        self._write(branch, name, (self._file_sha(content), content), f"foreign: {name}")

    # -- internals ----------------------------------------------------

    def _file_sha(self, content: str) -> str:
        return hashlib.sha1(f"{next(self._seq)}:{content}".encode()).hexdigest()[:12]

    def _write(self, branch: str, name: str, entry: tuple[str, str] | None, message: str) -> CommitRef:
        b = self.branches[branch]
        parent = b.head
        if entry is None:
            del b.files[name]
        else:
            b.files[name] = entry
        b.head = f"commit-{next(self._seq)}"
        self.commits[branch].append(message)
        return CommitRef(sha=b.head, parent_sha=parent)

    async def _enter(self, operation: str, *args) -> None:
        await asyncio.sleep(0)
        self.calls.append((operation, *args))
        if operation in self.fail:
            raise self.fail.pop(operation)

    def _branch(self, operation: str, branch: str | None) -> _Branch:
        name = branch or self.base_branch
        if name not in self.branches:
            raise TransientIOError(operation, detail=f"no branch {name}")
        return self.branches[name]

    # -- FileStore ----------------------------------------------------

    async def find_by_external_id(self, external_id: str) -> PostReference | None:
        await self._enter("find_by_external_id", external_id)
        for name, (sha, _) in self.branches[self.base_branch].files.items():
            if external_id_from_name(name) == external_id:
                return PostReference(path=f"{self.content_path}/{name}", name=name, sha=sha)
        return None

    async def create(self, name, content, message, branch=None) -> CommitRef:
        await self._enter("create", name, branch)
        b = self._branch("create", branch)
        if name in b.files:
            raise Conflict("create", detail=f"{name} exists")
        return self._write(branch or self.base_branch, name, (self._file_sha(content), content), message)

    async def update(self, name, content, sha, message, branch=None) -> CommitRef:
        await self._enter("update", name, branch)
        b = self._branch("update", branch)
        if name not in b.files or b.files[name][0] != sha:
            raise StaleVersion("update", detail=f"{name} does not match {sha}")
        return self._write(branch or self.base_branch, name, (self._file_sha(content), content), message)

    async def delete(self, name, sha, message, branch=None) -> CommitRef:
        await self._enter("delete", name, branch)
        b = self._branch("delete", branch)
        if name not in b.files or b.files[name][0] != sha:
            raise StaleVersion("delete", detail=f"{name} does not match {sha}")
        return self._write(branch or self.base_branch, name, None, message)

    async def create_branch(self, from_branch=None) -> PendingBranch:
        await self._enter("create_branch", from_branch)
        base_ref = from_branch or self.base_branch
        source = self.branches[base_ref]
        head_ref = f"postsync/{uuid.uuid4().hex}"
        self.branches[head_ref] = _Branch(
            head=source.head, files=dict(source.files), fork_files=dict(source.files)
        )
        self.commits[head_ref] = []
        return PendingBranch(head_ref=head_ref, base_ref=base_ref, base_sha=source.head)

    async def open_pull_request(self, title, base, head) -> PullRequestRef:
        await self._enter("open_pull_request", title, base, head)
        pr_id = len(self.pulls) + 1
        self.pulls[pr_id] = {"title": title, "base": base, "head": head, "merged": False}
        return PullRequestRef(id=pr_id, head_sha=self.branches[head].head)

    async def merge_pull_request(self, pull_request_id, commit_title, expected_head_sha) -> None:
        await self._enter("merge_pull_request", pull_request_id, expected_head_sha)
        pr = self.pulls[pull_request_id]
        head = self.branches[pr["head"]]
        if head.head != expected_head_sha:
            raise StaleVersion("merge_pull_request", detail="Head branch was modified")
        base = self.branches[pr["base"]]
        for name in set(head.fork_files) | set(head.files):
            before, after = head.fork_files.get(name), head.files.get(name)
            if before == after:
                continue
            if after is None:
                base.files.pop(name, None)
            else:
                base.files[name] = after
        base.head = f"commit-{next(self._seq)}"
        self.commits[pr["base"]].append(commit_title)
        pr["merged"] = True

    async def delete_branch(self, head_ref) -> None:
        await self._enter("delete_branch", head_ref)
        del self.branches[head_ref]


@pytest.fixture
def store():
    return InMemoryFileStore()


@pytest.fixture
def github_config():
    return GitHubConfig(repo="acme/blog", base_branch="master", content_path="content/blog")


@pytest.fixture
def sample_config(github_config):
    return PostsyncConfig(github=github_config)


@pytest.fixture
def create_payload():
    return {
        "event": "post_create",
        "metadata": {
            "token": "able-secret",
            "slug_id": "abc123",
            "created_at": "2021-01-01",
        },
        "content": {"title": "Hello World", "body": "text"},
    }


@pytest.fixture
def update_payload():
    return {
        "event": "post_update",
        "metadata": {
            "token": "able-secret",
            "slug_id": "abc123",
            "created_at": "2021-01-01",
            "updated_at": "2021-02-01",
        },
        "content": {
            "title": "Hello World",
            "body": "updated text",
            "subtitle": "A greeting",
            "tags": ["intro"],
        },
    }


@pytest.fixture
def delete_payload():
    return {
        "event": "post_delete",
        "metadata": {"token": "able-secret", "slug_id": "abc123"},
    }
