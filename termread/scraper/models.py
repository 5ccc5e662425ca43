"""Data models for the fetch step."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RawPage:
    """The raw HTTP response for a single URL fetch.

    ``url`` is the final URL after redirects, so relative links in ``html``
    resolve against it.
    """

    url: str
    html: str
    status_code: int
