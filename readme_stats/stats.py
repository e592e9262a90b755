from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from .config import AppConfig
from .github_api import (
    GitHubSession,
    count_repo_commits,
    get_user,
    list_user_repos,
    search_issues,
)
from .models import StatsSummary

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SearchQuery:
    query: str
    sort: Optional[str] = None
    order: Optional[str] = None
    per_page: Optional[int] = 1

    def run(self, session: GitHubSession) -> Dict[str, Any]:
        return search_issues(session, self.query, sort=self.sort, order=self.order, per_page=self.per_page)


def build_queries(username: str) -> Dict[str, SearchQuery]:
    """The issue searches behind the summary, keyed by what they count.

    Ordering of pull requests is part of the query itself.
    """
    return {
        "issues": SearchQuery(f"author:{username} type:issue"),
        "first_pull_request": SearchQuery(f"author:{username} type:pr", sort="created", order="asc"),
        "latest_pull_request": SearchQuery(f"author:{username} type:pr", sort="created", order="desc"),
        "merged_pull_requests": SearchQuery(f"author:{username} type:pr is:merged"),
        "comments": SearchQuery(f"commenter:{username}"),
    }


def collect_stats(session: GitHubSession, config: AppConfig, today: Optional[date] = None) -> StatsSummary:
    username = config.github.username
    queries = build_queries(username)

    repos = list_user_repos(session, username)
    total_stars = sum_stars(repos, exclude_private=config.stats.exclude_private)

    total_commits = 0
    for repo in repos:
        total_commits += count_repo_commits(session, repo.get("full_name") or f"{username}/{repo['name']}")

    issues = queries["issues"].run(session)
    first_prs = queries["first_pull_request"].run(session)
    latest_prs = queries["latest_pull_request"].run(session)
    merged = queries["merged_pull_requests"].run(session)
    comments = queries["comments"].run(session)
    user = get_user(session, username)

    first_pr = first_item(first_prs)
    latest_pr = first_item(latest_prs)
    stamp = today or datetime.now(timezone.utc).date()

    logger.debug("Aggregated %d repositories for %s", len(repos), username)
    return StatsSummary(
        username=username,
        issues_opened=int(issues["total_count"]),
        pull_requests_opened=int(first_prs["total_count"]),
        pull_requests_merged=int(merged["total_count"]),
        comments_on_issues=int(comments["total_count"]),
        public_repo_count=int(user["public_repos"]),
        total_stars=total_stars,
        total_commits=total_commits,
        followers=int(user["followers"]),
        sponsored_accounts=config.stats.sponsored_accounts,
        registered_date=to_calendar_date(user["created_at"]),
        first_pull_request_date=to_calendar_date(first_pr["created_at"]) if first_pr else None,
        first_pull_request_url=first_pr["html_url"] if first_pr else None,
        latest_pull_request_date=to_calendar_date(latest_pr["created_at"]) if latest_pr else None,
        latest_pull_request_url=latest_pr["html_url"] if latest_pr else None,
        stat_updated=stamp.isoformat(),
    )


def sum_stars(repos: Iterable[Dict[str, Any]], exclude_private: bool = False) -> int:
    return sum(
        int(repo["stargazers_count"])
        for repo in repos
        if not (exclude_private and repo.get("private", False))
    )


def first_item(search_result: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    items: List[Dict[str, Any]] = search_result["items"]
    return items[0] if items else None


def to_calendar_date(value: str) -> str:
    """Reduce an ISO-8601 timestamp to its UTC calendar date (``YYYY-MM-DD``).

    Plain dates pass through unchanged.
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()
