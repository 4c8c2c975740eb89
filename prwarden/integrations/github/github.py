import jwt
import time
import requests
import os
from typing import Dict, Any, List, Optional

from prwarden.config import settings
from prwarden.integrations.github.types import (
    ChangedFile,
    PostedReview,
    PullRequestDiff,
    PullRequestMetadata,
)
from prwarden.models.review_comment import ReviewComment, Severity
from prwarden.review.errors import GitHubError
from prwarden.review.summary import category_emoji
from prwarden.utils.diff_position import find_diff_position
from prwarden.utils.logger import logger


API_URL = "https://api.github.com"

SEVERITY_EMOJI = {
    Severity.ERROR: "🔴",
    Severity.WARNING: "🟡",
    Severity.SUGGESTION: "💡",
}

FALLBACK_NOTICE = """🤖 **AI Code Review Temporarily Unavailable**

I attempted to review this pull request, but the AI service is currently overloaded.

**What happened?**
- The AI service is experiencing high traffic (503 Service Unavailable)
- I tried multiple times with exponential backoff but couldn't get a response

**What's next?**
- Push a new commit to trigger a fresh review
- Or request a retry through the review API

**Manual Review Checklist:**
- [ ] Check for security vulnerabilities
- [ ] Verify performance optimizations
- [ ] Ensure code readability and maintainability
- [ ] Follow language/framework best practices
- [ ] Add appropriate tests and documentation

Sorry for the inconvenience!"""


class GitHub:
    """GitHub REST client used by the review orchestrator.

    Authenticates with a personal token (GITHUB_TOKEN) when one is set,
    otherwise as a GitHub App (GITHUB_APP_ID + GITHUB_APP_PRIVATE_KEY_PATH).
    Installation tokens and the bot identity are cached on the instance.
    """

    def __init__(self, timeout: Optional[int] = None):
        self.token = os.getenv("GITHUB_TOKEN")
        self.app_id = os.getenv("GITHUB_APP_ID")
        self.app_private_key_path = os.getenv("GITHUB_APP_PRIVATE_KEY_PATH")
        self.timeout = timeout or settings.GITHUB_TIMEOUT

        if not self.token and not all([self.app_id, self.app_private_key_path]):
            error_msg = (
                "GitHub environment variables not properly configured. "
                "Please set GITHUB_TOKEN, or GITHUB_APP_ID and GITHUB_APP_PRIVATE_KEY_PATH"
            )
            logger.error(error_msg)
            raise ValueError(error_msg)

        # Cache for installation access tokens with expiration
        self._access_tokens: Dict[str, Dict[str, Any]] = {}
        self._bot_login: Optional[str] = None

    @staticmethod
    def _api_headers(token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github.v3+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def generate_jwt(self) -> str:
        """Generate a JWT token for GitHub App authentication.

        Returns:
            str: JWT token for GitHub API authentication

        Raises:
            GitHubError: If the private key cannot be read or signed with
        """
        try:
            with open(self.app_private_key_path, "r") as f:
                private_key = f.read()
        except FileNotFoundError:
            error_msg = f"Private key file not found at {self.app_private_key_path}"
            logger.error(error_msg)
            raise GitHubError(error_msg)

        payload = {
            "iat": int(time.time()) - 60,  # 1 minute in the past for clock skew
            "exp": int(time.time()) + (9 * 60),  # 9 minutes from now (max 10)
            "iss": self.app_id,
        }
        try:
            return jwt.encode(payload, private_key, algorithm="RS256")
        except (jwt.PyJWTError, ValueError) as e:
            error_msg = f"Failed to generate JWT token: {e}"
            logger.error(error_msg)
            raise GitHubError(error_msg)

    def _request(
        self, method: str, url: str, headers: Dict[str, str], **kwargs
    ) -> requests.Response:
        try:
            response = requests.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            status_code = None
            error_msg = f"GitHub API request {method} {url} failed: {e}"
            if e.response is not None:
                status_code = e.response.status_code
                error_msg += f" - Response: {e.response.text}"
            logger.error(error_msg)
            raise GitHubError(error_msg, status_code=status_code) from e

    def get_installation_access_token(self, owner: str, repo: str) -> str:
        """Get an installation access token for a repository, with caching."""
        repo_full_name = f"{owner}/{repo}"
        now = time.time()

        token_data = self._access_tokens.get(repo_full_name)
        if token_data and now < token_data.get("expires_at", 0):
            return token_data["token"]

        app_headers = self._api_headers(self.generate_jwt())
        installation = self._request(
            "GET", f"{API_URL}/repos/{owner}/{repo}/installation", app_headers
        ).json()
        installation_id = installation.get("id")
        if not installation_id:
            raise GitHubError(f"No installation ID found for {repo_full_name}")

        token_response = self._request(
            "POST",
            f"{API_URL}/app/installations/{installation_id}/access_tokens",
            app_headers,
        ).json()
        access_token = token_response.get("token")
        if not access_token:
            raise GitHubError(f"No access token found for {repo_full_name}")

        # GitHub tokens last 1 hour
        self._access_tokens[repo_full_name] = {
            "token": access_token,
            "expires_at": now + 3540,  # 59 minutes
        }
        return access_token

    def _headers(self, owner: str, repo: str) -> Dict[str, str]:
        if self.token:
            return self._api_headers(self.token)
        return self._api_headers(self.get_installation_access_token(owner, repo))

    def get_bot_login(self, owner: str, repo: str) -> str:
        """Login the bot posts reviews under."""
        if self._bot_login:
            return self._bot_login

        if self.token:
            user = self._request(
                "GET", f"{API_URL}/user", self._headers(owner, repo)
            ).json()
            login = user.get("login")
        else:
            app_info = self._request(
                "GET", f"{API_URL}/app", self._api_headers(self.generate_jwt())
            ).json()
            login = f"{app_info['slug']}[bot]" if app_info.get("slug") else None

        if not login:
            raise GitHubError("Could not determine the bot identity from GitHub.")

        self._bot_login = login
        logger.info(f"Retrieved bot identity: {self._bot_login}")
        return self._bot_login

    def get_pull_request_diff(self, owner: str, repo: str, number: int) -> PullRequestDiff:
        """Fetch pull request metadata and its changed files (with patches)."""
        logger.info(f"Fetching PR data for {owner}/{repo}#{number}")
        headers = self._headers(owner, repo)
        pull_request = self._request(
            "GET", f"{API_URL}/repos/{owner}/{repo}/pulls/{number}", headers
        ).json()
        files = self._request(
            "GET",
            f"{API_URL}/repos/{owner}/{repo}/pulls/{number}/files",
            headers,
            params={"per_page": settings.MAX_FILES_PER_PR},
        ).json()

        diff = PullRequestDiff(
            owner=owner,
            repo=repo,
            number=number,
            metadata=PullRequestMetadata.from_api(pull_request),
            files=[ChangedFile.from_api(f) for f in files],
        )
        logger.info(f"Fetched {len(diff.files)} changed file(s) for {owner}/{repo}#{number}")
        return diff

    def has_bot_already_reviewed(
        self, owner: str, repo: str, number: int, commit_sha: Optional[str] = None
    ) -> bool:
        """True when the bot has a review on the PR, on ``commit_sha`` when one is given."""
        try:
            reviews = self._request(
                "GET",
                f"{API_URL}/repos/{owner}/{repo}/pulls/{number}/reviews",
                self._headers(owner, repo),
            ).json()
            bot_login = self.get_bot_login(owner, repo)
        except GitHubError as e:
            logger.warning(f"Error checking existing reviews for {owner}/{repo}#{number}: {e}")
            return False

        return any(
            (review.get("user") or {}).get("login") == bot_login
            and (commit_sha is None or review.get("commit_id") == commit_sha)
            for review in reviews
        )

    @staticmethod
    def format_comment_body(comment: ReviewComment) -> str:
        severity_emoji = SEVERITY_EMOJI.get(comment.severity, "💬")
        body = (
            f"{severity_emoji} {category_emoji(comment.category)} "
            f"**{comment.category.upper()}**: {comment.comment}"
        )
        if comment.suggestion:
            body += f"\n\n**Suggestion:**\n```\n{comment.suggestion}\n```"
        return body

    def prepare_inline_comments(
        self, comments: List[ReviewComment], files: List[ChangedFile]
    ) -> List[Dict[str, Any]]:
        patches = {f.filename: f.patch for f in files}
        review_comments = []
        for comment in comments:
            position = find_diff_position(patches.get(comment.file), comment.line)
            if position is None:
                logger.warning(
                    f"Could not determine diff position for {comment.file}:{comment.line}"
                )
                continue
            review_comments.append(
                {
                    "path": comment.file,
                    "position": position,
                    "body": self.format_comment_body(comment),
                }
            )
        return review_comments

    def post_review(
        self,
        owner: str,
        repo: str,
        number: int,
        comments: List[ReviewComment],
        summary: str,
        diff: Optional[PullRequestDiff] = None,
    ) -> PostedReview:
        """Submit one review holding the summary and the inline comments.

        The verdict is always COMMENT; GitHub refuses approvals and change
        requests on pull requests authored by the same identity.
        """
        if diff is None:
            diff = self.get_pull_request_diff(owner, repo, number)

        review_comments = self.prepare_inline_comments(comments, diff.files)
        review_payload = {
            "body": summary or "Automated code review completed.",
            "event": "COMMENT",
            "comments": review_comments,
        }
        if diff.metadata.head_sha:
            review_payload["commit_id"] = diff.metadata.head_sha

        logger.info(
            f"Posting review to {owner}/{repo}#{number} with {len(review_comments)} inline comment(s)"
        )
        review = self._request(
            "POST",
            f"{API_URL}/repos/{owner}/{repo}/pulls/{number}/reviews",
            self._headers(owner, repo),
            json=review_payload,
        ).json()

        logger.info(f"Successfully posted review {review.get('id')} to PR #{number}")
        return PostedReview(
            external_review_id=review.get("id"), comments_posted=len(review_comments)
        )

    def post_fallback_notice(self, owner: str, repo: str, number: int) -> None:
        self._request(
            "POST",
            f"{API_URL}/repos/{owner}/{repo}/issues/{number}/comments",
            self._headers(owner, repo),
            json={"body": FALLBACK_NOTICE},
        )
        logger.info(f"Fallback comment posted on {owner}/{repo}#{number}")
