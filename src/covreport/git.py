from __future__ import annotations

"""Branch switching for the base coverage comparison.

CONTRACT
- Inputs: Repo path, branch name
- Outputs:
  - Working tree checked out at the requested branch
- Invariants:
  - Fetch is best-effort (shallow clones often lack the base branch)
  - Checkout is forced; generated reports in the tree are not preserved
- Failure:
  - Raises GitError when the checkout itself fails
"""

from pathlib import Path

from loguru import logger

from .util.shell import run_cmd


class GitError(RuntimeError):
    pass


def is_git_repo(repo: Path) -> bool:
    return (repo / ".git").exists()


def current_ref(repo: Path) -> str | None:
    res = run_cmd(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=repo, timeout_s=10)
    if not res.ok:
        return None
    ref = res.stdout_text().strip()
    if not ref or ref == "HEAD":
        # Detached HEAD (the usual Actions checkout); fall back to the commit.
        sha = run_cmd(["git", "rev-parse", "HEAD"], cwd=repo, timeout_s=10)
        if not sha.ok:
            return None
        return sha.stdout_text().strip() or None
    return ref


def checkout(repo: Path, ref: str) -> None:
    res = run_cmd(["git", "checkout", "-f", ref], cwd=repo, timeout_s=60)
    if not res.ok:
        raise GitError(f"git checkout {ref} failed (rc={res.returncode}): {res.stderr_text().strip()}")
    logger.info(f"Checked out {ref}")


def switch_branch(repo: Path, branch: str | None) -> None:
    if not branch:
        raise GitError("No branch to switch to")

    fetch = run_cmd(
        ["git", "fetch", "--depth=1", "origin", branch], cwd=repo, timeout_s=120
    )
    if not fetch.ok:
        logger.warning(f"git fetch origin {branch} failed (rc={fetch.returncode}); trying local ref")

    checkout(repo, f"origin/{branch}" if fetch.ok else branch)
