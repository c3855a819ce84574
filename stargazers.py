"""
Concurrent stargazer fetching.

Pages are fetched in parallel on a bounded thread pool, collected into a
single list under a lock, and sorted by star time once every page is done.
"""

import time
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from config import logger
from github_client import fetch_stargazers_page, get_repo_info
from models import PageOutcome


def last_page(stargazers_count, page_size):
    """
    Last page index to request.

    GitHub's stargazer count is only a hint, so this deliberately asks for
    one page past the exact boundary; that page normally comes back empty.
    """
    return stargazers_count // page_size + 1


def sort_star_events(events):
    """Stable sort by star time, oldest first."""
    return sorted(events, key=lambda event: event.starred_at)


def fetch_all_stargazers(repo, settings, sleep=time.sleep, fetch_page=fetch_stargazers_page):
    """
    Fetch every stargazer of `repo`, ordered by star time.

    Args:
        repo (RepoInfo): Repository with its (approximate) stargazer count.
        settings (Settings): Fetch configuration.
        sleep (callable, optional): Used for rate-limit waits.
        fetch_page (callable, optional): Single-page fetcher.

    Returns:
        list: StarEvent values sorted ascending by `starred_at`.

    Raises:
        StarHistoryError: The first page failure seen; no partial list is
        returned.
    """
    pages = last_page(repo.stargazers_count, settings.page_size)
    logger.info(f"Fetching {pages} pages of stargazers for {repo.full_name}")

    stars = []
    lock = threading.Lock()
    first_error = None

    def run(page):
        result = fetch_page(repo, page, settings, sleep)
        if result.outcome is PageOutcome.OK:
            with lock:
                stars.extend(result.events)
        return result

    with ThreadPoolExecutor(max_workers=settings.max_concurrency,
                            thread_name_prefix="stargazers") as executor:
        futures = [executor.submit(run, page) for page in range(1, pages + 1)]
        for future in as_completed(futures):
            if future.cancelled():
                continue
            result = future.result()
            if result.outcome is PageOutcome.FAILED and first_error is None:
                first_error = result.error
                # Pages already in flight finish; queued ones never start.
                for pending in futures:
                    pending.cancel()

    if first_error is not None:
        raise first_error

    logger.info(f"Fetched {len(stars)} stargazers for {repo.full_name}")
    return sort_star_events(stars)


def fetch_star_events(full_name, settings, sleep=time.sleep):
    """Look up `full_name` and fetch all of its stargazers."""
    repo = get_repo_info(full_name, settings, sleep)
    return fetch_all_stargazers(repo, settings, sleep)
