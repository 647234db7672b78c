"""Centralized network boundary helpers.

Callers receive plain status/body/error values; nothing here raises on HTTP or
transport failures so remote checks can report every failure in one run.
"""

from __future__ import annotations

import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class FetchResult:
    status: int | None
    body: str = ""
    error: str | None = None


FetchText = Callable[[str], FetchResult]
HeadStatus = Callable[[str], FetchResult]


def fetch_text(url: str, timeout_seconds: float = 10.0) -> FetchResult:
    req = urllib.request.Request(url, method="GET")
    try:
        with urllib.request.urlopen(req, timeout=timeout_seconds) as resp:  # nosec - registry controls endpoint
            return FetchResult(int(resp.status), resp.read().decode("utf-8", errors="replace"))
    except urllib.error.HTTPError as exc:
        return FetchResult(int(exc.code), "", None)
    except (urllib.error.URLError, TimeoutError, OSError, ValueError) as exc:
        reason = getattr(exc, "reason", exc)
        return FetchResult(None, "", str(reason))


def head_status(url: str, timeout_seconds: float = 8.0) -> FetchResult:
    req = urllib.request.Request(url, method="HEAD")
    try:
        with urllib.request.urlopen(req, timeout=timeout_seconds) as resp:  # nosec - registry controls endpoint
            return FetchResult(int(resp.status))
    except urllib.error.HTTPError as exc:
        return FetchResult(int(exc.code))
    except (urllib.error.URLError, TimeoutError, OSError, ValueError) as exc:
        reason = getattr(exc, "reason", exc)
        return FetchResult(None, "", str(reason))
