"""Identification of supported mining clients from their user agents."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable

from stratumpool.message import ErrorKind, MessageError

# Mining client identifiers.
CPU = "cpuminer"
GOMINER = "gominer"
NICEHASH_VALIDATOR = "nicehash"

_NUMERIC = r"0|[1-9][0-9]*"
_PRERELEASE_ID = r"0|[1-9][0-9]*|[0-9]*[a-zA-Z-][0-9a-zA-Z-]*"
_BUILD_ID = r"[0-9a-zA-Z-]+"

_SEMVER = re.compile(
    rf"(?P<major>{_NUMERIC})\.(?P<minor>{_NUMERIC})\.(?P<patch>{_NUMERIC})"
    rf"(?:-(?P<prerelease>(?:{_PRERELEASE_ID})(?:\.(?:{_PRERELEASE_ID}))*))?"
    rf"(?:\+(?P<build>{_BUILD_ID}(?:\.{_BUILD_ID})*))?"
)


@dataclass(frozen=True)
class ParsedUserAgent:
    """The client name and semantic version parts of a user agent."""

    client_name: str
    major: int
    minor: int
    patch: int
    prerelease: str = ""
    build: str = ""


UserAgentMatch = Callable[[ParsedUserAgent], bool]


def parse_user_agent(user_agent: str) -> ParsedUserAgent | None:
    """Split a ``name/semver`` user agent, or return None if it is malformed."""
    parts = user_agent.split("/", 1)
    if len(parts) != 2:
        return None
    client_name, version = parts
    match = _SEMVER.fullmatch(version)
    if match is None:
        return None
    return ParsedUserAgent(
        client_name=client_name,
        major=int(match["major"]),
        minor=int(match["minor"]),
        patch=int(match["patch"]),
        prerelease=match["prerelease"] or "",
        build=match["build"] or "",
    )


def matches_user_agent_max_minor(client_name: str, required_major: int,
                                 max_minor: int) -> UserAgentMatch:
    """Return a matcher for a client name, exact major and maximum minor."""

    def matches(parsed: ParsedUserAgent) -> bool:
        return (parsed.client_name == client_name
                and parsed.major == required_major
                and parsed.minor <= max_minor)

    return matches


_SUPPORTED_CLIENTS: tuple[tuple[UserAgentMatch, tuple[str, ...]], ...] = (
    (matches_user_agent_max_minor("cpuminer", 1, 0), (CPU,)),
    (matches_user_agent_max_minor("decred-gominer", 2, 1), (GOMINER,)),
    (matches_user_agent_max_minor("NiceHash", 1, 0), (NICEHASH_VALIDATOR,)),
)


def identify_mining_clients(user_agent: str) -> list[str]:
    """Return the mining client ids a user agent may belong to."""
    parsed = parse_user_agent(user_agent)
    if parsed is not None:
        for matches, clients in _SUPPORTED_CLIENTS:
            if matches(parsed):
                return list(clients)
    raise MessageError(
        ErrorKind.MINER_UNKNOWN,
        f"connected miner with id {user_agent} is unsupported",
    )