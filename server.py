"""
FastMCP Server implementation for GitHub star history.
Exposes tools for comparing star counts and histories and summarizing a repository's stargazers.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from fastmcp import FastMCP
from config import load_settings, logger
from github_client import StarHistoryError, get_repo_info
from history import SERIES_START, star_series, summarize
from stargazers import fetch_star_events

SYSTEM_PROMPT = """
You are a helpful assistant that answers questions about the popularity of GitHub repositories.
You can compare the current star counts and star histories of several repositories and summarize
when and how a single repository gained its stars. Repository names must be given as 'owner/name'.
"""

# Initialize FastMCP Server
mcp = FastMCP("StarHistory", instructions=SYSTEM_PROMPT)


def parse_repo_names(repos):
    """Splits a comma-separated list of 'owner/name' strings."""
    return [name.strip() for name in repos.split(",") if name.strip()]


def repo_infos(names, settings):
    """Looks up each repository, most starred first."""
    infos = [get_repo_info(name, settings) for name in names]
    return sorted(infos, key=lambda info: info.stargazers_count, reverse=True)


def format_repo_infos(infos):
    """One aligned 'name : count' line per repository."""
    if not infos:
        return ""
    width = max(len(info.full_name) for info in infos)
    return "\n".join(f"{info.full_name:<{width}} : {info.stargazers_count}" for info in infos)


def format_summary(full_name, summary):
    lines = [f"--- Star history for {full_name} ---",
             f"Total stars: {summary['total']}"]
    if summary["total"]:
        lines.append(f"First star: {summary['first_star'].isoformat()}")
        lines.append(f"Latest star: {summary['last_star'].isoformat()}")
        lines.append(f"Busiest day: {summary['busiest_day'].isoformat()} ({summary['busiest_day_stars']} stars)")
        by_type = ", ".join(f"{kind}: {count}" for kind, count in sorted(summary["by_type"].items()))
        lines.append(f"By account type: {by_type}")
    return "\n".join(lines)


def compare_star_histories(names, settings, since=SERIES_START):
    """
    Fetch every repository's stargazers in parallel and build one series each.

    Repositories that fail are logged and left out.

    Returns:
        dict: {name: (timestamps, counts)} for each repository that succeeded,
        in the order given.
    """
    def fetch(name):
        try:
            return fetch_star_events(name, settings)
        except StarHistoryError as e:
            logger.error(f"Skipping {name}: {str(e)}")
            return None

    with ThreadPoolExecutor(max_workers=max(len(names), 1)) as executor:
        results = list(executor.map(fetch, names))

    return {name: star_series(events, since=since)
            for name, events in zip(names, results) if events is not None}


def format_series_csv(series):
    """CSV points as 'repo,starred_at,stars' rows."""
    lines = ["repo,starred_at,stars"]
    for name, (timestamps, counts) in series.items():
        for timestamp, count in zip(timestamps, counts):
            starred_at = datetime.fromtimestamp(timestamp, tz=timezone.utc)
            lines.append(f"{name},{starred_at.isoformat()},{int(count)}")
    return "\n".join(lines)


# Core implementation functions (testable without FastMCP decorator)
def _repo_star_counts_impl(repos: str, token: str = None) -> str:
    """
    Core implementation for comparing star counts.

    Args:
        repos: Comma-separated repository names (e.g. 'minio/minio,ceph/ceph').
        token: Optional GitHub personal access token (defaults to GITHUB_TOKEN env).
    """
    names = parse_repo_names(repos)
    if not names:
        return "Error: No repositories given."
    try:
        infos = repo_infos(names, load_settings(token))
        return format_repo_infos(infos)
    except StarHistoryError as e:
        logger.error(f"Error in repo_star_counts: {str(e)}")
        return f"Error in repo_star_counts: {str(e)}"


def _star_history_impl(repo: str, token: str = None) -> str:
    """
    Core implementation for summarizing a repository's stargazers.

    Args:
        repo: Repository name as 'owner/name'.
        token: Optional GitHub personal access token (defaults to GITHUB_TOKEN env).
    """
    try:
        events = fetch_star_events(repo, load_settings(token))
    except StarHistoryError as e:
        logger.error(f"Error in star_history: {str(e)}")
        return f"Error in star_history: {str(e)}"

    logger.info(f"Summarized {len(events)} stars for {repo}")
    return format_summary(repo, summarize(events))


def _star_history_comparison_impl(repos: str, token: str = None) -> str:
    """
    Core implementation for comparing star histories.

    Args:
        repos: Comma-separated repository names (e.g. 'minio/minio,ceph/ceph').
        token: Optional GitHub personal access token (defaults to GITHUB_TOKEN env).
    """
    names = parse_repo_names(repos)
    if not names:
        return "Error: No repositories given."

    series = compare_star_histories(names, load_settings(token))
    if not series:
        return "Error: Could not fetch any of the requested repositories."
    return format_series_csv(series)


# FastMCP decorated functions (wrappers around implementation)
@mcp.tool(name="repo_star_counts")
def repo_star_counts_tool(repos: str, token: str = None) -> str:
    """
    Compare the current star counts of one or more GitHub repositories.

    Args:
        repos: Comma-separated repository names (e.g. 'minio/minio,ceph/ceph').
        token: Optional GitHub personal access token to avoid rate limits.
    """
    return _repo_star_counts_impl(repos, token)


@mcp.tool(name="star_history")
def star_history_tool(repo: str, token: str = None) -> str:
    """
    Fetch every stargazer of a repository and summarize its star history.

    Args:
        repo: Repository name as 'owner/name'.
        token: Optional GitHub personal access token to avoid rate limits.
    """
    return _star_history_impl(repo, token)


@mcp.tool(name="star_history_comparison")
def star_history_comparison_tool(repos: str, token: str = None) -> str:
    """
    Cumulative star counts over time for several repositories, as CSV points.

    Args:
        repos: Comma-separated repository names (e.g. 'minio/minio,ceph/ceph').
        token: Optional GitHub personal access token to avoid rate limits.
    """
    return _star_history_comparison_impl(repos, token)


def run():
    """Entry point for the MCP server."""
    mcp.run()
