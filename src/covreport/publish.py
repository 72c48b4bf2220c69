"""Report publishing: PR comment (create or update) or commit comment."""

from __future__ import annotations

from typing import Any

from loguru import logger

from .config import ActionOptions
from .github import GitHubClient
from .report import report_marker


def find_previous_comment(
    comments: list[dict[str, Any]], marker: str
) -> dict[str, Any] | None:
    for comment in comments:
        if marker in str(comment.get("body") or ""):
            return comment
    return None


def generate_pr_report(
    text: str,
    options: ActionOptions,
    pull_request: dict[str, Any],
    client: GitHubClient,
) -> dict[str, Any]:
    number = options.pr_number or pull_request.get("number")
    if not number:
        raise ValueError("Pull request number is unknown")

    previous = find_previous_comment(client.list_issue_comments(int(number)), report_marker(options))
    if previous:
        logger.info(f"Updating report comment {previous.get('id')} on PR #{number}")
        return client.update_issue_comment(int(previous["id"]), text)
    logger.info(f"Creating report comment on PR #{number}")
    return client.create_issue_comment(int(number), text)


def generate_commit_report(text: str, sha: str, client: GitHubClient) -> dict[str, Any]:
    if not sha:
        raise ValueError("Commit sha is unknown")
    logger.info(f"Creating report comment on commit {sha[:12]}")
    return client.create_commit_comment(sha, text)
