"""Rename orchestration: stage a delete + create on a branch, then squash-merge."""

from __future__ import annotations

import asyncio
import logging

from postsync.errors import StaleVersion
from postsync.store.base import FileStore
from postsync.store.models import CommitRef, PendingBranch, PendingTransaction

logger = logging.getLogger(__name__)


class RenameOrchestrator:
    """Composes single-file store calls into one rename-with-content-update.

    The store only commits one file per call, so a rename would otherwise land
    as two commits on the base branch. Staging both on a throwaway branch and
    squash-merging yields exactly one base commit, or none on failure.
    """

    def __init__(self, store: FileStore) -> None:
        self.store = store

    async def rename_and_replace(
        self, old_name: str, old_sha: str, new_name: str, new_content: str
    ) -> PendingTransaction:
        """Replace old_name with new_name (holding new_content) in one base commit.

        Steps:
            1. Create a uniquely named staging branch off base
            2. Delete old_name and create new_name on it, concurrently
            3. Check the staging branch holds exactly those two commits
            4. Open the pull request and check its head
            5. Squash-merge, guarded by the expected head sha
            6. Delete the staging branch

        Any failure aborts and propagates. The staging branch (and pull
        request, if opened) are left behind for inspection; base is untouched.
        """
        title = f"rename: {old_name} -> {new_name}"

        # 1. Staging branch
        branch = await self.store.create_branch()
        head_ref = branch.head_ref

        # 2. Sub-commits
        try:
            removed, added = await self._stage(branch, old_name, old_sha, new_name, new_content)
        except Exception:
            logger.warning("rename %s -> %s abandoned on %s", old_name, new_name, head_ref)
            raise

        # 3. Nobody else may have written to the staging branch
        expected_head = _chain_tip(branch.base_sha, removed, added)
        if expected_head is None:
            logger.warning("staging branch %s holds unexpected commits", head_ref)
            raise StaleVersion(
                "rename_and_replace", detail=f"unexpected commits on {head_ref}"
            )

        # 4. Pull request
        pr = await self.store.open_pull_request(
            title=title, base=branch.base_ref, head=head_ref
        )
        if pr.head_sha != expected_head:
            logger.warning(
                "pull request #%d head %s != staged %s", pr.id, pr.head_sha, expected_head
            )
            raise StaleVersion(
                "rename_and_replace", detail=f"{head_ref} moved after staging"
            )
        transaction = PendingTransaction(
            pull_request_id=pr.id, head_sha=pr.head_sha, head_ref=head_ref
        )

        # 5. Merge
        await self.store.merge_pull_request(
            transaction.pull_request_id, title, expected_head_sha=transaction.head_sha
        )
        logger.info("renamed %s -> %s via #%d", old_name, new_name, pr.id)

        # 6. Cleanup
        try:
            await self.store.delete_branch(head_ref)
        except Exception:
            logger.warning("could not delete staging branch %s", head_ref, exc_info=True)

        return transaction

    async def _stage(
        self,
        branch: PendingBranch,
        old_name: str,
        old_sha: str,
        new_name: str,
        new_content: str,
    ) -> tuple[CommitRef, CommitRef]:
        """Run the delete and the create concurrently; both settle before returning."""
        results = await asyncio.gather(
            self.store.delete(
                old_name, old_sha, f"delete: {old_name}", branch=branch.head_ref
            ),
            self.store.create(
                new_name, new_content, f"create: {new_name}", branch=branch.head_ref
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        removed, added = results
        return removed, added


def _chain_tip(base_sha: str, first: CommitRef, second: CommitRef) -> str | None:
    """Return the tip if the two commits stack directly on base_sha, else None."""
    if first.parent_sha == base_sha and second.parent_sha == first.sha:
        return second.sha
    if second.parent_sha == base_sha and first.parent_sha == second.sha:
        return first.sha
    return None
