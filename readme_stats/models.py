from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(slots=True, frozen=True)
class StatsSummary:
    """Everything the README template can reference, computed once per run.

    Dates are ``YYYY-MM-DD`` strings. The pull request fields are ``None``
    when the user has not opened any pull request.
    """

    username: str
    issues_opened: int
    pull_requests_opened: int
    pull_requests_merged: int
    comments_on_issues: int
    public_repo_count: int
    total_stars: int
    total_commits: int
    followers: int
    sponsored_accounts: int
    registered_date: str
    first_pull_request_date: Optional[str]
    first_pull_request_url: Optional[str]
    latest_pull_request_date: Optional[str]
    latest_pull_request_url: Optional[str]
    stat_updated: str

    def as_context(self) -> Dict[str, Any]:
        return asdict(self)
