"""
Intent resolver.

transcript -> ResolvedIntent | None

Rules:
- Pure: no I/O, no clocks, no hidden state.
- Deterministic: the same transcript always yields the same intent.
- Total: never raises for string input (empty, gibberish, ambiguous).

Scoring:
    score = len(keyword) * length_weight + priority

A keyword counts when it is a substring of the normalized transcript.
The best score is only replaced on strict improvement, so the first-seen
match wins ties. With the default weight a longer keyword always beats a
shorter one, and priority only decides between equal lengths.

Substring matching means a short keyword can fire inside unrelated text
("stop" in "bus stop"). That is the accepted policy; tune length_weight
or the table rather than the tie-break order.
"""

from __future__ import annotations

from typing import Iterable

from constants import KEYWORD_LENGTH_WEIGHT, SEARCH_QUERY_MIN_CHARS
from intents.command_table import (
    DEFAULT_COMMAND_TABLE,
    IGNORED_QUERIES,
    SEARCH_PREFIXES,
    CommandTable,
)
from intents.resolved import (
    CommandIntent,
    ResolvedIntent,
    SearchIntent,
    UnknownIntent,
)


def normalize_transcript(transcript: str | None) -> str:
    """Trim and lower-case a transcript; None becomes the empty string."""
    if not transcript:
        return ""
    return transcript.strip().lower()


class IntentResolver:
    """
    Keyword scorer with a search-prefix fallback.

    Holds only immutable configuration; resolve() keeps no state between
    calls.
    """

    def __init__(
        self,
        table: CommandTable = DEFAULT_COMMAND_TABLE,
        *,
        search_prefixes: Iterable[str] = SEARCH_PREFIXES,
        ignored_queries: Iterable[str] = IGNORED_QUERIES,
        length_weight: int = KEYWORD_LENGTH_WEIGHT,
    ) -> None:
        self._table = table
        self._search_prefixes = tuple(search_prefixes)
        self._ignored_queries = frozenset(ignored_queries)
        self._length_weight = length_weight

    @property
    def table(self) -> CommandTable:
        return self._table

    def resolve(self, transcript: str | None) -> ResolvedIntent | None:
        text = normalize_transcript(transcript)
        if not text:
            return None

        best = self._best_keyword_match(text)
        if best is not None:
            return best

        query = self.extract_search_query(text)
        if query is not None:
            return SearchIntent(
                feedback=f'Searching for "{query}"',
                transcript=text,
                query=query,
            )

        return UnknownIntent(transcript=text)

    def extract_search_query(self, text: str) -> str | None:
        """
        Return the free-text query after the first accepted search prefix.

        Prefixes are matched against the start of the text, in order. A
        remainder that is too short or is a filler word is rejected and the
        next prefix is tried.
        """
        normalized = normalize_transcript(text)
        for prefix in self._search_prefixes:
            if not normalized.startswith(prefix):
                continue
            query = normalized[len(prefix):].strip()
            if len(query) >= SEARCH_QUERY_MIN_CHARS and query not in self._ignored_queries:
                return query
        return None

    def score(self, keyword: str, priority: int) -> int:
        return len(keyword) * self._length_weight + priority

    def _best_keyword_match(self, text: str) -> CommandIntent | None:
        best: CommandIntent | None = None
        best_score = -1

        for entry in self._table:
            for keyword in entry.keywords:
                if keyword not in text:
                    continue
                score = self.score(keyword, entry.priority)
                if score > best_score:
                    best_score = score
                    best = CommandIntent(
                        action=entry.action,
                        feedback=entry.feedback,
                        transcript=text,
                        matched_keyword=keyword,
                    )

        return best


_DEFAULT_RESOLVER = IntentResolver()


def resolve(transcript: str | None) -> ResolvedIntent | None:
    """Resolve a transcript against the default command table."""
    return _DEFAULT_RESOLVER.resolve(transcript)
