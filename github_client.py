"""
GitHub API client for repository metadata and stargazer pages.
"""

import time
import requests
from config import logger
from models import PageResult, decode_repo_info, decode_star_events

STAR_MEDIA_TYPE = "application/vnd.github.v3.star+json"
JSON_MEDIA_TYPE = "application/vnd.github.v3+json"


class StarHistoryError(Exception):
    """Base exception for star history failures."""


class TransportError(StarHistoryError):
    """Raised when the request never got a response (network failure)."""


class GitHubAPIError(StarHistoryError):
    """Raised when GitHub answers with an unusable response."""

    def __init__(self, message, status_code=None, body=None):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


def build_headers(settings, accept=JSON_MEDIA_TYPE):
    """Request headers, with Authorization only when a token is configured."""
    headers = {"Accept": accept}
    if settings.token:
        headers["Authorization"] = f"token {settings.token}"
    return headers


def get_with_rate_limit_retry(url, headers, settings, sleep=time.sleep):
    """
    GET `url`, waiting and retrying for as long as GitHub answers 403.

    Every 403 is treated as a rate limit: sleep `settings.rate_limit_wait`
    seconds and send the identical request again. There is no retry cap.

    Returns:
        requests.Response: The first non-403 response.

    Raises:
        TransportError: On connection-level failures (never retried).
    """
    while True:
        try:
            response = requests.get(url, headers=headers, timeout=settings.timeout)
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        if response.status_code != 403:
            return response

        logger.warning(f"Rate limit hit, waiting {settings.rate_limit_wait:g}s before trying again.")
        sleep(settings.rate_limit_wait)


def _raise_for_status(response, what):
    if 200 <= response.status_code < 300:
        return
    logger.error(f"GitHub API Error: {response.status_code} - {response.text}")
    raise GitHubAPIError(
        f"failed to get {what} from github api: {response.text}",
        status_code=response.status_code,
        body=response.text,
    )


def get_repo_info(full_name, settings, sleep=time.sleep):
    """
    Fetch metadata for a repository.

    Args:
        full_name (str): Repository name, e.g. 'minio/minio'.
        settings (Settings): Fetch configuration.

    Returns:
        RepoInfo: Name, stargazer count and creation date.
    """
    url = f"{settings.api_url}/repos/{full_name}"
    logger.info(f"Fetching repository info for {full_name}")
    response = get_with_rate_limit_retry(url, build_headers(settings), settings, sleep)
    _raise_for_status(response, f"repository {full_name}")
    try:
        return decode_repo_info(response.json())
    except ValueError as e:
        raise GitHubAPIError(f"could not decode repository {full_name}: {e}",
                             status_code=response.status_code, body=response.text) from e


def fetch_stargazers_page(repo, page, settings, sleep=time.sleep):
    """
    Fetch one page of stargazers for a repository.

    Args:
        repo (RepoInfo): The repository being fetched.
        page (int): 1-based page index.
        settings (Settings): Fetch configuration.
        sleep (callable, optional): Used for the rate-limit wait.

    Returns:
        PageResult: OK with the page's events, END_OF_DATA for an empty
        page, or FAILED carrying a TransportError / GitHubAPIError.
    """
    url = (f"{settings.api_url}/repos/{repo.full_name}/stargazers"
           f"?page={page}&per_page={settings.page_size}")
    headers = build_headers(settings, accept=STAR_MEDIA_TYPE)

    try:
        logger.info(f"Fetching stargazers for {repo.full_name} - Page {page}")
        response = get_with_rate_limit_retry(url, headers, settings, sleep)
        _raise_for_status(response, "stargazers")
        try:
            events = decode_star_events(response.json())
        except ValueError as e:
            raise GitHubAPIError(f"could not decode stargazers page {page}: {e}",
                                 status_code=response.status_code, body=response.text) from e
    except StarHistoryError as e:
        return PageResult.failed(page, e)

    if not events:
        return PageResult.end_of_data(page)
    return PageResult.ok(page, events)
