import argparse
import sys

from config import load_settings, logger
from github_client import StarHistoryError
from history import daily_star_counts
from server import (
    compare_star_histories,
    format_repo_infos,
    format_series_csv,
    parse_repo_names,
    repo_infos,
    run,
)
from stargazers import fetch_star_events

DEFAULT_PROJECTS = [
    "minio/minio",
    "mongodb/mongo",
    "kubernetes/kubernetes",
    "apache/cassandra",
    "apache/kafka",
    "cockroachdb/cockroach",
    "elastic/elasticsearch",
]


def print_repo_infos(names, settings):
    print(format_repo_infos(repo_infos(names, settings)))


def print_history(names, settings):
    for name in names:
        events = fetch_star_events(name, settings)
        print(f"=== {name} ({len(events)} stars) ===")
        total = 0
        for day, count in daily_star_counts(events).items():
            total += count
            print(f"{day.isoformat()}  +{count:<5} {total}")


def print_comparison(names, settings):
    series = compare_star_histories(names, settings)
    if not series:
        raise StarHistoryError("Could not fetch any of the requested repositories.")
    print(format_series_csv(series))


def main(argv=None):
    parser = argparse.ArgumentParser(description="GitHub star history")
    parser.add_argument("--repos", default=",".join(DEFAULT_PROJECTS),
                        help="comma-separated list of repos to compare")
    parser.add_argument("--mode", default="info", choices=["info", "history", "compare", "serve"],
                        help="info: star counts, history: stars per day, "
                             "compare: cumulative stars as CSV, serve: MCP server")
    args = parser.parse_args(argv)

    if args.mode == "serve":
        run()
        return 0

    settings = load_settings()
    names = parse_repo_names(args.repos)
    try:
        if args.mode == "info":
            print_repo_infos(names, settings)
        elif args.mode == "compare":
            print_comparison(names, settings)
        else:
            print_history(names, settings)
    except StarHistoryError as e:
        logger.error(str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
