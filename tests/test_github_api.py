from __future__ import annotations

import unittest

import requests

from readme_stats.config import GitHubConfig
from readme_stats.github_api import (
    AuthenticationError,
    GitHubAPIError,
    GitHubSession,
    count_repo_commits,
    fetch_json,
    search_issues,
)

from _fakes import fake_session, make_response


class SessionTests(unittest.TestCase):
    def test_create_sets_fixed_headers(self) -> None:
        session = GitHubSession.create(GitHubConfig(token="abc", api_version="2022-11-28"))
        try:
            headers = session.http.headers
            self.assertEqual(headers["Authorization"], "Bearer abc")
            self.assertEqual(headers["Accept"], "application/vnd.github+json")
            self.assertEqual(headers["X-GitHub-Api-Version"], "2022-11-28")
            self.assertTrue(headers["User-Agent"].startswith("readme-stats/"))
        finally:
            session.close()

    def test_create_without_token_has_no_authorization(self) -> None:
        with GitHubSession.create(GitHubConfig(token=None)) as session:
            self.assertNotIn("Authorization", session.http.headers)


class FetchJsonTests(unittest.TestCase):
    def test_returns_decoded_body_and_logs_path(self) -> None:
        session = fake_session(lambda path, params: make_response(200, {"ok": True}))
        with self.assertLogs("readme_stats.github_api", level="INFO") as logs:
            body = fetch_json(session, "user")
        self.assertEqual(body, {"ok": True})
        self.assertIn("Fetching: user", logs.output[0])
        self.assertEqual(session.http.calls, [("user", {})])

    def test_error_status_is_wrapped_with_cause(self) -> None:
        session = fake_session(lambda path, params: make_response(404, {"message": "Not Found"}))
        with self.assertRaises(GitHubAPIError) as ctx:
            fetch_json(session, "users/nobody/repos")
        self.assertNotIsInstance(ctx.exception, AuthenticationError)
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertIn("users/nobody/repos", str(ctx.exception))
        self.assertIn("Not Found", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, requests.HTTPError)

    def test_rejected_token_is_authentication_error(self) -> None:
        session = fake_session(lambda path, params: make_response(401, {"message": "Bad credentials"}))
        with self.assertRaises(AuthenticationError) as ctx:
            fetch_json(session, "user")
        self.assertEqual(ctx.exception.status_code, 401)

    def test_rate_limit_is_not_authentication_error(self) -> None:
        session = fake_session(
            lambda path, params: make_response(403, {"message": "rate limit"}, {"X-RateLimit-Remaining": "0"})
        )
        with self.assertRaises(GitHubAPIError) as ctx:
            fetch_json(session, "user")
        self.assertNotIsInstance(ctx.exception, AuthenticationError)

    def test_missing_token_fails_without_request(self) -> None:
        session = fake_session(lambda path, params: make_response(200, {}), token=None)
        with self.assertRaises(AuthenticationError):
            fetch_json(session, "user")
        self.assertEqual(session.http.calls, [])

    def test_transport_failure_is_wrapped(self) -> None:
        def handler(path, params):
            raise requests.ConnectionError("connection refused")

        session = fake_session(handler)
        with self.assertRaises(GitHubAPIError) as ctx:
            fetch_json(session, "user")
        self.assertIsNone(ctx.exception.status_code)
        self.assertIsInstance(ctx.exception.__cause__, requests.ConnectionError)

    def test_invalid_json_is_wrapped(self) -> None:
        def handler(path, params):
            response = make_response(200, {})
            response._content = b"<html>"
            return response

        session = fake_session(handler)
        with self.assertRaises(GitHubAPIError):
            fetch_json(session, "user")

    def test_non_object_error_body_is_still_wrapped(self) -> None:
        session = fake_session(lambda path, params: make_response(500, ["unexpected", "shape"]))
        with self.assertRaises(GitHubAPIError) as ctx:
            fetch_json(session, "user")
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIsInstance(ctx.exception.__cause__, requests.HTTPError)

    def test_single_attempt_per_call(self) -> None:
        session = fake_session(lambda path, params: make_response(500, {"message": "boom"}))
        with self.assertRaises(GitHubAPIError):
            fetch_json(session, "user")
        self.assertEqual(len(session.http.calls), 1)


class EndpointTests(unittest.TestCase):
    def test_search_issues_passes_operators(self) -> None:
        session = fake_session(lambda path, params: make_response(200, {"total_count": 0, "items": []}))
        search_issues(session, "author:octocat type:pr", sort="created", order="asc", per_page=1)
        self.assertEqual(
            session.http.calls,
            [("search/issues", {"q": "author:octocat type:pr", "sort": "created", "order": "asc", "per_page": "1"})],
        )

    def test_empty_repository_counts_zero_commits(self) -> None:
        session = fake_session(lambda path, params: make_response(409, {"message": "Git Repository is empty."}))
        self.assertEqual(count_repo_commits(session, "octocat/empty"), 0)

    def test_commit_count_is_page_length(self) -> None:
        session = fake_session(lambda path, params: make_response(200, [{"sha": "1"}, {"sha": "2"}]))
        self.assertEqual(count_repo_commits(session, "octocat/alpha"), 2)
        self.assertEqual(session.http.calls, [("repos/octocat/alpha/commits", {"per_page": "100"})])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
