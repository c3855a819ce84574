from datetime import datetime, timezone
from unittest.mock import patch

from config import Settings
from github_client import GitHubAPIError, TransportError
from models import RepoInfo, StarEvent
from server import (
    _repo_star_counts_impl,
    _star_history_comparison_impl,
    _star_history_impl,
    compare_star_histories,
    format_repo_infos,
    parse_repo_names,
)


def test_parse_repo_names_skips_blanks():
    assert parse_repo_names(" minio/minio, ,ceph/ceph,") == ["minio/minio", "ceph/ceph"]


def test_format_repo_infos_aligns_names():
    output = format_repo_infos([RepoInfo("kubernetes/kubernetes", 100), RepoInfo("a/b", 5)])

    assert output.splitlines() == [
        "kubernetes/kubernetes : 100",
        "a/b                   : 5",
    ]


@patch("server.get_repo_info")
def test_repo_star_counts_orders_by_stars(mock_get_repo_info):
    counts = {"ceph/ceph": 10, "minio/minio": 40, "apache/kafka": 25}
    mock_get_repo_info.side_effect = lambda name, settings: RepoInfo(name, counts[name])

    output = _repo_star_counts_impl("ceph/ceph,minio/minio,apache/kafka", token="dummy")

    names = [line.split(":")[0].strip() for line in output.splitlines()]
    assert names == ["minio/minio", "apache/kafka", "ceph/ceph"]
    settings = mock_get_repo_info.call_args.args[1]
    assert settings.token == "dummy"


@patch("server.get_repo_info")
def test_repo_star_counts_reports_api_errors(mock_get_repo_info):
    mock_get_repo_info.side_effect = GitHubAPIError("failed to get repository nobody/none from github api: Not Found")

    output = _repo_star_counts_impl("nobody/none")

    assert output.startswith("Error in repo_star_counts:")
    assert "Not Found" in output


def test_repo_star_counts_requires_names():
    assert _repo_star_counts_impl(" , ") == "Error: No repositories given."


@patch("server.fetch_star_events")
def test_star_history_formats_summary(mock_fetch):
    mock_fetch.return_value = [
        StarEvent(datetime(2020, 5, 1, 8, tzinfo=timezone.utc), "alice"),
        StarEvent(datetime(2020, 5, 1, 9, tzinfo=timezone.utc), "bot", "Bot"),
        StarEvent(datetime(2020, 5, 4, 9, tzinfo=timezone.utc), "bob"),
    ]

    output = _star_history_impl("owner/repo")

    assert "--- Star history for owner/repo ---" in output
    assert "Total stars: 3" in output
    assert "First star: 2020-05-01T08:00:00+00:00" in output
    assert "Busiest day: 2020-05-01 (2 stars)" in output
    assert "By account type: Bot: 1, User: 2" in output


@patch("server.fetch_star_events")
def test_star_history_reports_transport_errors(mock_fetch):
    mock_fetch.side_effect = TransportError("Request to https://api.github.com failed")

    output = _star_history_impl("owner/repo")

    assert output.startswith("Error in star_history:")


def comparison_events(name, settings):
    if name == "nobody/none":
        raise GitHubAPIError("failed to get repository nobody/none from github api: Not Found")
    if name == "owner/old":
        return [
            StarEvent(datetime(2012, 6, 1, tzinfo=timezone.utc), "early"),
            StarEvent(datetime(2014, 1, 1, tzinfo=timezone.utc), "alice"),
            StarEvent(datetime(2015, 1, 1, tzinfo=timezone.utc), "bob"),
        ]
    return [StarEvent(datetime(2020, 5, 1, tzinfo=timezone.utc), "carol")]


@patch("server.fetch_star_events")
def test_star_history_comparison_skips_failed_repos_and_early_stars(mock_fetch):
    mock_fetch.side_effect = comparison_events

    output = _star_history_comparison_impl("owner/old,nobody/none,owner/new", token="dummy")

    assert output.splitlines() == [
        "repo,starred_at,stars",
        "owner/old,2014-01-01T00:00:00+00:00,2",
        "owner/old,2015-01-01T00:00:00+00:00,3",
        "owner/new,2020-05-01T00:00:00+00:00,1",
    ]
    assert mock_fetch.call_count == 3


@patch("server.fetch_star_events")
def test_compare_star_histories_returns_series_per_repo(mock_fetch):
    mock_fetch.side_effect = comparison_events

    series = compare_star_histories(["owner/old", "nobody/none"], Settings())

    assert list(series) == ["owner/old"]
    timestamps, counts = series["owner/old"]
    assert list(counts) == [2, 3]
    assert timestamps[0] == datetime(2014, 1, 1, tzinfo=timezone.utc).timestamp()


@patch("server.fetch_star_events")
def test_star_history_comparison_reports_when_nothing_fetched(mock_fetch):
    mock_fetch.side_effect = comparison_events

    output = _star_history_comparison_impl("nobody/none")

    assert output == "Error: Could not fetch any of the requested repositories."
