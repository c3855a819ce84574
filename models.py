"""
Data model for repositories and their stargazers.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class RepoInfo:
    """Repository metadata needed to plan a stargazer fetch."""
    full_name: str
    stargazers_count: int
    created_at: Optional[str] = None


@dataclass(frozen=True)
class StarEvent:
    """One star on a repository: when it happened and who did it."""
    starred_at: datetime
    login: str
    user_type: str = "User"


class PageOutcome(enum.Enum):
    OK = "ok"
    END_OF_DATA = "end_of_data"
    FAILED = "failed"


@dataclass(frozen=True)
class PageResult:
    """Outcome of fetching a single stargazer page."""
    page: int
    outcome: PageOutcome
    events: tuple = field(default_factory=tuple)
    error: Optional[Exception] = None

    @classmethod
    def ok(cls, page, events):
        return cls(page, PageOutcome.OK, tuple(events))

    @classmethod
    def end_of_data(cls, page):
        return cls(page, PageOutcome.END_OF_DATA)

    @classmethod
    def failed(cls, page, error):
        return cls(page, PageOutcome.FAILED, error=error)


def parse_timestamp(value):
    """Parses an ISO-8601 timestamp such as '2015-03-01T12:00:00Z'."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def decode_star_events(payload):
    """
    Decodes a stargazers page body into StarEvent values.

    Args:
        payload (list): Parsed JSON array from the star+json media type.

    Returns:
        list: StarEvent values in page order.

    Raises:
        ValueError: If the payload is not an array of star records.
    """
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array, got {type(payload).__name__}")

    events = []
    for item in payload:
        try:
            user = item.get("user") or {}
            events.append(StarEvent(
                starred_at=parse_timestamp(item["starred_at"]),
                login=user.get("login"),
                user_type=user.get("type", "User"),
            ))
        except (AttributeError, KeyError, TypeError) as e:
            raise ValueError(f"malformed stargazer record: {item!r}") from e
    return events


def decode_repo_info(payload):
    """Decodes a /repos/{owner}/{name} body into RepoInfo."""
    try:
        return RepoInfo(
            full_name=payload["full_name"],
            stargazers_count=int(payload.get("stargazers_count") or 0),
            created_at=payload.get("created_at"),
        )
    except (AttributeError, KeyError, TypeError) as e:
        raise ValueError("malformed repository record") from e
