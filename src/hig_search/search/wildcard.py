"""
Glob-style pattern matching over titles and symbol names.

`*` matches any run of characters and `?` exactly one. Patterns without
wildcards fall back to a case-insensitive substring test. Every match scores
in [0.1, 1.0]; non-matches are excluded rather than scored 0.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Iterable, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_MAX_PATTERN_LENGTH = 100

_WILDCARD_RUN_RE = re.compile(r"[*?]+")


class InvalidPattern(ValueError):
    """Raised when a wildcard pattern cannot be used for matching."""


@dataclass(frozen=True)
class WildcardPattern:
    """A parsed pattern and its compiled regular expression."""

    original: str
    regex: re.Pattern[str]
    is_wildcard: bool

    @property
    def wildcard_count(self) -> int:
        return self.original.count("*") + self.original.count("?")

    @property
    def static_parts(self) -> list[str]:
        return [part for part in _WILDCARD_RUN_RE.split(self.original) if part]


@dataclass(frozen=True)
class WildcardMatch:
    """Outcome of testing one text against a pattern."""

    text: str
    score: float
    matched_segments: tuple[str, ...]
    full_match: bool


def has_wildcards(text: str) -> bool:
    return "*" in text or "?" in text


def wildcard_to_regex(pattern: str) -> str:
    """Translate a glob pattern into an anchored regular expression."""
    translated: list[str] = []
    for char in pattern:
        if char == "*":
            translated.append(".*")
        elif char == "?":
            translated.append(".")
        else:
            translated.append(re.escape(char))
    return f"^{''.join(translated)}$"


def parse_pattern(
    pattern: str,
    *,
    case_sensitive: bool = False,
    whole_word: bool = False,
) -> WildcardPattern:
    is_wildcard = has_wildcards(pattern)
    source = wildcard_to_regex(pattern) if is_wildcard else re.escape(pattern)
    if whole_word:
        source = rf"\b{source}\b"

    flags = re.DOTALL
    if not case_sensitive:
        flags |= re.IGNORECASE
    try:
        regex = re.compile(source, flags)
    except re.error as exc:
        raise InvalidPattern(f"Invalid pattern {pattern!r}: {exc}") from exc
    return WildcardPattern(original=pattern, regex=regex, is_wildcard=is_wildcard)


def score_match(text: str, pattern: WildcardPattern) -> float:
    """Relevance of a text already known to match *pattern*."""
    if not pattern.is_wildcard:
        text_lower = text.lower()
        query_lower = pattern.original.lower()
        if text_lower == query_lower:
            return 1.0
        if text_lower.startswith(query_lower):
            return 0.9
        if query_lower in text_lower:
            return 0.7
        return 0.5

    wildcard_count = pattern.wildcard_count
    score = 0.6
    # Fewer wildcards and longer patterns are more specific.
    score += max(0.0, (5 - wildcard_count) * 0.1)
    score += min(0.2, len(pattern.original) * 0.01)
    if wildcard_count >= 2 and len(text) > len(pattern.original) * 3:
        score -= 0.1
    return min(1.0, max(0.1, score))


def matched_segments(text: str, pattern: WildcardPattern) -> tuple[str, ...]:
    if not pattern.is_wildcard:
        found = pattern.regex.search(text)
        return (found.group(0),) if found else ()
    text_lower = text.lower()
    return tuple(part for part in pattern.static_parts if part.lower() in text_lower)


def matches_pattern(text: str, pattern: WildcardPattern) -> WildcardMatch:
    if not pattern.regex.search(text):
        return WildcardMatch(text=text, score=0.0, matched_segments=(), full_match=False)
    return WildcardMatch(
        text=text,
        score=score_match(text, pattern),
        matched_segments=matched_segments(text, pattern),
        full_match=True,
    )


def highlight_matches(
    text: str,
    pattern: WildcardPattern,
    start: str = "**",
    end: str = "**",
) -> str:
    """Wrap the literal parts of *pattern* found in *text* with markers."""
    if not pattern.is_wildcard:
        parts = [pattern.original] if pattern.original else []
    else:
        # Longest first so shorter parts don't split longer ones.
        parts = sorted(pattern.static_parts, key=len, reverse=True)

    if not parts:
        return text
    alternation = "|".join(re.escape(part) for part in parts)
    return re.sub(f"({alternation})", rf"{start}\1{end}", text, flags=re.IGNORECASE)


def validate_pattern(
    pattern: str, *, max_length: int = DEFAULT_MAX_PATTERN_LENGTH
) -> tuple[bool, str | None]:
    """Return `(is_valid, error)` for a candidate pattern."""
    if not isinstance(pattern, str) or not pattern.strip():
        return False, "Pattern must be a non-empty string"
    if len(pattern) > max_length:
        return False, f"Pattern too long: maximum {max_length} characters allowed"
    try:
        parse_pattern(pattern)
    except InvalidPattern as exc:
        return False, str(exc)
    return True, None


def pattern_examples() -> list[dict[str, Any]]:
    """Example patterns for user guidance."""
    return [
        {
            "pattern": "UI*",
            "description": 'Find items starting with "UI"',
            "examples": ["UIButton", "UILabel", "UIViewController"],
        },
        {
            "pattern": "*Button",
            "description": 'Find items ending with "Button"',
            "examples": ["UIButton", "NSButton", "ActionButton"],
        },
        {
            "pattern": "*View*",
            "description": 'Find items containing "View"',
            "examples": ["UITableView", "NSView", "NavigationView"],
        },
        {
            "pattern": "NS????",
            "description": "Find NS classes with exactly 4 additional characters",
            "examples": ["NSView", "NSText", "NSMenu"],
        },
        {
            "pattern": "?avigation",
            "description": "Find navigation-related items with any first character",
            "examples": ["Navigation", "navigation"],
        },
    ]


def pattern_suggestions(pattern: str, result_count: int) -> list[str]:
    """Hints for widening or narrowing a pattern based on how much it matched."""
    suggestions: list[str] = []
    wildcard = has_wildcards(pattern)

    if result_count == 0:
        suggestions.append("Try using wildcards like * or ? to broaden your search")
        suggestions.append("Check spelling of your search pattern")
        if not wildcard:
            suggestions.append(f'Try "{pattern}*" to find items starting with "{pattern}"')
            suggestions.append(f'Try "*{pattern}*" to find items containing "{pattern}"')
    elif result_count < 3 and "*" not in pattern:
        suggestions.append(f'Try "*{pattern}*" for broader results')

    if result_count > 50:
        suggestions.append("Try making your pattern more specific")
        if pattern == "*":
            suggestions.append('Use a more specific pattern instead of just "*"')
        if pattern.count("*") > 2:
            suggestions.append("Try using fewer wildcards for more specific results")
    return suggestions


def _field_value(item: Any, field: str) -> str:
    if isinstance(item, Mapping):
        value = item.get(field)
    else:
        value = getattr(item, field, None)
    return "" if value is None else str(value)


class WildcardMatcher:
    """Rank arbitrary items by their best-matching field."""

    def __init__(self, *, max_pattern_length: int = DEFAULT_MAX_PATTERN_LENGTH) -> None:
        self.max_pattern_length = max_pattern_length

    def match(
        self,
        items: Iterable[T],
        pattern: str,
        fields: Sequence[str] = ("title",),
        *,
        case_sensitive: bool = False,
        whole_word: bool = False,
        max_results: int = 50,
        min_score: float = 0.1,
    ) -> list[tuple[T, WildcardMatch]]:
        is_valid, error = validate_pattern(pattern, max_length=self.max_pattern_length)
        if not is_valid:
            raise InvalidPattern(error)
        parsed = parse_pattern(pattern, case_sensitive=case_sensitive, whole_word=whole_word)

        results: list[tuple[T, WildcardMatch]] = []
        for item in items:
            best: WildcardMatch | None = None
            for field in fields:
                candidate = matches_pattern(_field_value(item, field), parsed)
                if candidate.score > 0 and (best is None or candidate.score > best.score):
                    best = candidate
            if best is not None and best.score >= min_score:
                results.append((item, best))

        results.sort(key=lambda pair: -pair[1].score)
        return results[: max(max_results, 0)]


def match_wildcard(
    items: Iterable[T],
    pattern: str,
    fields: Sequence[str] = ("title",),
    **options: Any,
) -> list[tuple[T, WildcardMatch]]:
    """Match *items* against *pattern* with a default `WildcardMatcher`."""
    return WildcardMatcher().match(items, pattern, fields, **options)
