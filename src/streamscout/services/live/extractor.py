"""
Extraction helpers for embedded JSON and viewer counters in YouTube pages.

YouTube watch and channel pages carry their state in inline ``<script>``
assignments (``ytInitialData``, ``ytInitialPlayerResponse``) and in
localized free text such as ``"1.234 watching now"``. None of these shapes
are documented, so every helper here tolerates their absence or
malformation: a miss is reported as ``None`` (or as an ``Extraction`` with
a ``miss_reason``), never as an exception.

Functions
---------
extract_named_json
    Locate and parse a named JSON object embedded in HTML.
extract_number_from_free_text
    Parse a locale-grouped integer (``12,453`` / ``12.453`` / ``12 453``).
find_concurrent_viewers
    Depth-bounded search of a JSON tree for a concurrent viewer count.
extract_watching_now_from_html
    Regex fallback over raw HTML for ``<number> watching now``.
is_live_now_indicated
    Permissive check for any live-now signal in a watch page.
find_video_id_in_html
    First ``"videoId":"..."`` literal in a page.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_DEPTH = 64
_MAX_OBJECT_SCAN_CHARS = 5_000_000

# A whole JSON string literal or a single brace. String tokens are skipped
# when counting depth, so braces quoted inside them never count.
_OBJECT_TOKEN_RE = re.compile(r'"[^"\\]*(?:\\[\s\S][^"\\]*)*"|[{}]')

# Localized phrases that accompany a concurrent viewer counter.
VIEWER_PHRASE_RE = re.compile(
    r"(watching now|espectadores|mirando ahora|viendo ahora)",
    re.IGNORECASE,
)
_WATCHING_NOW_COUNT_RE = re.compile(
    r"(\d[\d.,\s]*)\s*(?:watching now|espectadores|mirando ahora|viendo ahora)",
    re.IGNORECASE,
)
_IS_LIVE_NOW_FLAG_RE = re.compile(r'"isLiveNow"\s*:\s*true')
_VIDEO_ID_LITERAL_RE = re.compile(r'"videoId":"([a-zA-Z0-9_-]{11})"')

# Grouped form must not be followed by another digit, so "12453" is read
# whole instead of stopping after "124".
_GROUPED_NUMBER_RE = re.compile(r"\d{1,3}(?:[.,\s]\d{3})+(?!\d)|\d+")
_SEPARATORS_RE = re.compile(r"[.,\s]")
_NBSP = ("\u00a0", "\u202f")


@dataclass(frozen=True)
class Extraction(Generic[T]):
    """
    Outcome of one extraction attempt.

    Attributes
    ----------
    value : T | None
        The extracted value, or None on a miss.
    strategy : str | None
        Name of the strategy that produced the value.
    miss_reason : str | None
        Why nothing was extracted, when ``value`` is None.
    """

    value: Optional[T] = None
    strategy: Optional[str] = None
    miss_reason: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.value is not None

    @classmethod
    def hit(cls, value: T, strategy: str) -> "Extraction[T]":
        return cls(value=value, strategy=strategy)

    @classmethod
    def miss(cls, reason: str) -> "Extraction[T]":
        return cls(miss_reason=reason)


# ---------------------------------------------------------------------------
# Named JSON blobs
# ---------------------------------------------------------------------------


@lru_cache(maxsize=32)
def _assignment_re(name: str) -> re.Pattern[str]:
    # var name = {...};  name = {...};  window["name"] = {...};
    return re.compile(
        r'(?:var\s+|window\["|)' + re.escape(name) + r'(?:"\])?\s*=\s*'
    )


@lru_cache(maxsize=32)
def _quoted_key_re(name: str) -> re.Pattern[str]:
    return re.compile(r'"' + re.escape(name) + r'"\s*:\s*')


@lru_cache(maxsize=32)
def _lazy_assignment_re(name: str) -> re.Pattern[str]:
    return re.compile(re.escape(name) + r"\s*=\s*(\{[\s\S]*?\});")


@lru_cache(maxsize=32)
def _lazy_quoted_key_re(name: str) -> re.Pattern[str]:
    return re.compile(
        r'"' + re.escape(name) + r'"\s*:\s*(\{[\s\S]*?\})\s*(?:,|\})'
    )


def _balanced_object_at(html: str, start: int) -> Optional[str]:
    """Brace-balanced ``{...}`` text opening at ``start``, or None."""
    if not html.startswith("{", start):
        return None

    depth = 0
    end = min(len(html), start + _MAX_OBJECT_SCAN_CHARS)
    for token in _OBJECT_TOKEN_RE.finditer(html, start, end):
        brace = token.group()
        if brace == "{":
            depth += 1
        elif brace == "}":
            depth -= 1
            if depth == 0:
                return html[start : token.end()]
    return None


def _parse_object(candidate: Optional[str]) -> Optional[dict[str, Any]]:
    if not candidate:
        return None
    try:
        data = json.loads(candidate)
    except (json.JSONDecodeError, ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def _scan_balanced(pattern: re.Pattern[str], html: str) -> Optional[dict[str, Any]]:
    for match in pattern.finditer(html):
        data = _parse_object(_balanced_object_at(html, match.end()))
        if data is not None:
            return data
    return None


def _scan_lazy(pattern: re.Pattern[str], html: str) -> Optional[dict[str, Any]]:
    match = pattern.search(html)
    return _parse_object(match.group(1)) if match else None


_JSON_STRATEGIES: list[tuple[str, Callable[[str, str], Optional[dict[str, Any]]]]] = [
    ("assignment", lambda html, name: _scan_balanced(_assignment_re(name), html)),
    ("quoted_key", lambda html, name: _scan_balanced(_quoted_key_re(name), html)),
    ("assignment_lazy", lambda html, name: _scan_lazy(_lazy_assignment_re(name), html)),
    ("quoted_key_lazy", lambda html, name: _scan_lazy(_lazy_quoted_key_re(name), html)),
]
"""Strategies for locating a named object, most precise first."""


def extract_named_json_result(
    html: str, variable_name: str
) -> Extraction[dict[str, Any]]:
    """
    Locate ``variable_name = {...};`` or ``"variable_name": {...}`` in HTML.

    Balanced-brace extraction is tried before the non-greedy regex shapes,
    which stop at the first plausible terminator and only parse when the
    object happens to contain no nested ``};``.

    Parameters
    ----------
    html : str
        Raw HTML source.
    variable_name : str
        JavaScript variable or JSON key, e.g. ``"ytInitialData"``.

    Returns
    -------
    Extraction[dict[str, Any]]
        The parsed object and the strategy that found it, or a miss.
    """
    if not html or not isinstance(html, str):
        return Extraction.miss("empty_html")
    if variable_name not in html:
        return Extraction.miss("name_not_present")

    for strategy, locate in _JSON_STRATEGIES:
        try:
            data = locate(html, variable_name)
        except Exception:
            logger.debug(
                "JSON strategy %s failed for %s", strategy, variable_name, exc_info=True
            )
            continue
        if data is not None:
            return Extraction.hit(data, strategy)

    return Extraction.miss("unparseable")


def extract_named_json(html: str, variable_name: str) -> Optional[dict[str, Any]]:
    """Return the named JSON object embedded in ``html``, or None."""
    return extract_named_json_result(html, variable_name).value


# ---------------------------------------------------------------------------
# Numbers in free text
# ---------------------------------------------------------------------------


def extract_number_from_free_text(text: Any) -> Optional[int]:
    """
    Parse the first locale-grouped integer in ``text``.

    Non-breaking spaces are normalized first; ``.``, ``,`` and whitespace
    are accepted as thousands separators.

    Examples
    --------
    >>> extract_number_from_free_text("12.453 espectadores")
    12453
    >>> extract_number_from_free_text("no digits") is None
    True
    """
    if not text or not isinstance(text, str):
        return None

    normalized = text
    for nbsp in _NBSP:
        normalized = normalized.replace(nbsp, " ")

    match = _GROUPED_NUMBER_RE.search(normalized)
    if not match:
        return None

    digits = _SEPARATORS_RE.sub("", match.group(0))
    try:
        return int(digits)
    except ValueError:
        return None


def extract_watching_now_from_html(html: str) -> Optional[int]:
    """Last-resort ``<number> watching now`` match over raw HTML."""
    if not html:
        return None
    normalized = html
    for nbsp in _NBSP:
        normalized = normalized.replace(nbsp, " ")
    match = _WATCHING_NOW_COUNT_RE.search(normalized)
    if not match:
        return None
    return extract_number_from_free_text(match.group(1))


# ---------------------------------------------------------------------------
# Concurrent viewers in a JSON tree
# ---------------------------------------------------------------------------


def _joined_run_text(runs: list[Any]) -> str:
    texts = [
        run.get("text")
        for run in runs
        if isinstance(run, dict) and isinstance(run.get("text"), str)
    ]
    return " ".join(t for t in texts if t)


class _ViewerSearch:
    """Depth-first collector of viewer-count candidates."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth
        self.candidates: list[tuple[int, str]] = []

    def _add(self, value: Optional[int], source: str) -> None:
        if value is not None:
            self.candidates.append((value, source))

    def _check_string(self, value: str) -> None:
        if VIEWER_PHRASE_RE.search(value):
            self._add(extract_number_from_free_text(value), "phrase_text")

    def walk(self, node: Any, depth: int = 0) -> None:
        if depth > self.max_depth:
            return

        if isinstance(node, list):
            for item in node:
                if isinstance(item, str):
                    self._check_string(item)
                elif isinstance(item, (dict, list)):
                    self.walk(item, depth + 1)
            return

        if not isinstance(node, dict):
            return

        view_count = node.get("viewCount")
        if isinstance(view_count, dict):
            runs = view_count.get("runs")
            if isinstance(runs, list):
                self._add(
                    extract_number_from_free_text(_joined_run_text(runs)),
                    "viewCount.runs",
                )
            simple_text = view_count.get("simpleText")
            if isinstance(simple_text, str):
                self._add(
                    extract_number_from_free_text(simple_text),
                    "viewCount.simpleText",
                )

        runs = node.get("runs")
        if isinstance(runs, list):
            joined = _joined_run_text(runs)
            if VIEWER_PHRASE_RE.search(joined):
                self._add(extract_number_from_free_text(joined), "phrase_runs")

        for value in node.values():
            if isinstance(value, str):
                self._check_string(value)
            elif isinstance(value, (dict, list)):
                self.walk(value, depth + 1)


def find_concurrent_viewers_result(
    root: Any, max_depth: int = DEFAULT_MAX_DEPTH
) -> Extraction[int]:
    """
    Search a JSON tree for a concurrent viewer count.

    Candidates are collected in depth-first order (keys in encounter order)
    from, per node: ``viewCount.runs[].text``, ``viewCount.simpleText``, a
    ``runs[]`` array whose joined text carries a viewer phrase, and any
    string value carrying a viewer phrase. The first non-negative candidate
    wins. Subtrees deeper than ``max_depth`` are skipped.

    Parameters
    ----------
    root : Any
        Parsed JSON (normally ``ytInitialData`` or the player response).
    max_depth : int, optional
        Maximum nesting depth to descend (default: 64).

    Returns
    -------
    Extraction[int]
        The viewer count and the field shape it came from, or a miss.
    """
    if not isinstance(root, (dict, list)):
        return Extraction.miss("not_a_tree")

    search = _ViewerSearch(max_depth=max_depth)
    try:
        search.walk(root)
    except Exception:
        # Malformed subtrees must not break a batch
        logger.debug("Viewer search aborted", exc_info=True)
        return Extraction.miss("traversal_error")

    for value, source in search.candidates:
        if value >= 0:
            return Extraction.hit(value, source)
    return Extraction.miss("no_candidates")


def find_concurrent_viewers(
    root: Any, max_depth: int = DEFAULT_MAX_DEPTH
) -> Optional[int]:
    """Return the first concurrent viewer count found in ``root``, or None."""
    return find_concurrent_viewers_result(root, max_depth=max_depth).value


# ---------------------------------------------------------------------------
# Live indicators
# ---------------------------------------------------------------------------


def live_now_indicators(html: str) -> list[str]:
    """
    List the live-now signals present in a watch page.

    Signals, any of which counts as live:

    - ``player_response``: ``microformat.playerMicroformatRenderer.
      liveBroadcastDetails.isLiveNow`` is literally ``true``
    - ``is_live_now_flag``: a loose ``"isLiveNow": true`` anywhere
    - ``watching_now_text``: a localized "watching now" phrase anywhere
    """
    if not html:
        return []

    indicators: list[str] = []
    try:
        player = extract_named_json(html, "ytInitialPlayerResponse") or {}
        details = (
            player.get("microformat", {})
            .get("playerMicroformatRenderer", {})
            .get("liveBroadcastDetails", {})
        )
        if isinstance(details, dict) and details.get("isLiveNow") is True:
            indicators.append("player_response")
    except AttributeError:
        pass

    if _IS_LIVE_NOW_FLAG_RE.search(html):
        indicators.append("is_live_now_flag")
    if VIEWER_PHRASE_RE.search(html):
        indicators.append("watching_now_text")
    return indicators


def is_live_now_indicated(html: str) -> bool:
    """
    Return True if a watch page shows any live-now signal.

    The check is a permissive OR over :func:`live_now_indicators`; a false
    positive costs less than hiding a real live stream.
    """
    return bool(live_now_indicators(html))


def find_video_id_in_html(html: str) -> Optional[str]:
    """Return the first ``"videoId":"<11 chars>"`` literal in ``html``."""
    if not html:
        return None
    match = _VIDEO_ID_LITERAL_RE.search(html)
    return match.group(1) if match else None
