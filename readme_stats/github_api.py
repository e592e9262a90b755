from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests
from requests import Response

from . import __version__
from .config import GitHubConfig

logger = logging.getLogger(__name__)

_USER_AGENT = f"readme-stats/{__version__}"
_EMPTY_REPO_STATUS = 409


class GitHubAPIError(Exception):
    """A request against the GitHub API did not produce a usable JSON body."""

    def __init__(self, path: str, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"Error fetching path `{path}`: {message}")
        self.path = path
        self.status_code = status_code


class AuthenticationError(GitHubAPIError):
    """The API token is missing or was rejected."""


@dataclass(slots=True)
class GitHubSession:
    http: requests.Session
    api_root: str
    token: Optional[str] = None

    @classmethod
    def create(cls, config: GitHubConfig) -> "GitHubSession":
        session = requests.Session()
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": config.api_version,
            "User-Agent": _USER_AGENT,
        }
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        session.headers.update(headers)
        return cls(http=session, api_root=config.api_root, token=config.token)

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "GitHubSession":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _error_message(response: Response) -> str:
    message = ""
    if response.headers.get("Content-Type", "").startswith("application/json"):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = str(body.get("message", ""))
    return f"{response.status_code} {response.reason or ''} {message}".strip()


def _raise_for_status(path: str, response: Response) -> None:
    try:
        response.raise_for_status()
    except requests.HTTPError as error:
        message = _error_message(response)
        rate_limited = response.headers.get("X-RateLimit-Remaining") == "0"
        if response.status_code == 401 or (response.status_code == 403 and not rate_limited):
            raise AuthenticationError(path, message, response.status_code) from error
        raise GitHubAPIError(path, message, response.status_code) from error


def fetch_json(session: GitHubSession, path: str, params: Optional[Dict[str, str]] = None) -> Any:
    """Issue one GET against ``path`` (relative to the API root) and return the decoded body.

    There is exactly one attempt per call. Every failure is re-raised as a
    :class:`GitHubAPIError` chained to the underlying exception.
    """
    logger.info("Fetching: %s", path)
    if not session.token:
        raise AuthenticationError(path, "no API token configured")

    url = f"{session.api_root}/{path.lstrip('/')}"
    try:
        response = session.http.get(url, params=params)
    except requests.RequestException as error:
        raise GitHubAPIError(path, str(error)) from error

    _raise_for_status(path, response)
    try:
        return response.json()
    except ValueError as error:
        raise GitHubAPIError(path, "response body is not valid JSON", response.status_code) from error


def list_user_repos(session: GitHubSession, username: str) -> List[Dict[str, Any]]:
    return fetch_json(session, f"users/{username}/repos", params={"type": "all", "per_page": "100"})


def search_issues(
    session: GitHubSession,
    query: str,
    *,
    sort: Optional[str] = None,
    order: Optional[str] = None,
    per_page: Optional[int] = None,
) -> Dict[str, Any]:
    params = {"q": query}
    if sort:
        params["sort"] = sort
    if order:
        params["order"] = order
    if per_page:
        params["per_page"] = str(per_page)
    return fetch_json(session, "search/issues", params=params)


def count_repo_commits(session: GitHubSession, full_name: str) -> int:
    """Count the commits on the first page of a repository's history.

    An empty repository answers 409 and counts as zero.
    """
    try:
        commits = fetch_json(session, f"repos/{full_name}/commits", params={"per_page": "100"})
    except GitHubAPIError as error:
        if error.status_code == _EMPTY_REPO_STATUS:
            logger.info("Repository %s is empty", full_name)
            return 0
        raise
    return len(commits)


def get_user(session: GitHubSession, username: str) -> Dict[str, Any]:
    return fetch_json(session, f"users/{username}")
