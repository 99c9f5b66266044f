"""Recognizers for comment syntax and annotation tags."""
from __future__ import annotations

import re

COMMENT_RE = re.compile(r"^\s*(?://|/\*|\*+(?:\s|/|$))")
# A leading star opening a rule is the universal selector, not a comment.
STAR_RULE_RE = re.compile(r"^\s*\*(?!/).*[{};]\s*$")
EMPTY_RE = re.compile(r"^\s*$")
SEPARATOR_RE = re.compile(r"^\s*[-=*#~_]{3,}\s*$")
IGNORE_RE = re.compile(r"^\s*@ignore\b")

CALLABLE_RE = re.compile(r"^\s*@?(function|mixin)\s+([\w-]+)")

RETURNS_RE = re.compile(r"^\s*@returns?\s+\{\s*([^}]+?)\s*\}\s*(?:-\s*)?(.*?)\s*$")
PARAM_RE = re.compile(
    r"^\s*@(?:param|arg|argument)\s+\{\s*([^}]+?)\s*\}\s+\$?([\w-]+)"
    r"\s*(?:\(\s*([^)]*?)\s*\))?\s*(?:-\s*)?(.*?)\s*$"
)
DEPRECATED_RE = re.compile(r"^\s*@deprecated\b\s*(.*?)\s*$")
AUTHOR_RE = re.compile(r"^\s*@author\s+(.+?)\s*$")
ACCESS_RE = re.compile(r"^\s*@access\s+(\S+)")
THROWS_RE = re.compile(r"^\s*@(?:throws?|exception)\s+(.+?)\s*$")
TODO_RE = re.compile(r"^\s*@todo\s+(.+?)\s*$")
ALIAS_RE = re.compile(r"^\s*@alias\s+(\S+)")
LINK_RE = re.compile(r"^\s*@link\s+(\S+)\s*(.*?)\s*$")

# Opening delimiter plus one space; ``*/`` is closing, not a leading star.
COMMENT_PREFIX_RE = re.compile(r"^\s*(?:/{2,}|/\*+|\*+(?!/))\s?")
COMMENT_SUFFIX_RE = re.compile(r"\s*\*+/\s*$")


def is_comment(line: str) -> bool:
    return COMMENT_RE.match(line) is not None and STAR_RULE_RE.match(line) is None


def is_empty(line: str) -> bool:
    return EMPTY_RE.match(line) is not None


def is_separator(line: str) -> bool:
    return SEPARATOR_RE.match(line) is not None


def is_ignore(line: str) -> bool:
    return IGNORE_RE.match(line) is not None


def is_function_or_mixin(line: str) -> re.Match[str] | None:
    """Match a declaration header; groups are ``(kind, name)``."""
    return CALLABLE_RE.match(line)


def is_returns(line: str) -> re.Match[str] | None:
    return RETURNS_RE.match(line)


def is_param(line: str) -> re.Match[str] | None:
    return PARAM_RE.match(line)


def is_deprecated(line: str) -> re.Match[str] | None:
    return DEPRECATED_RE.match(line)


def is_author(line: str) -> re.Match[str] | None:
    return AUTHOR_RE.match(line)


def is_access(line: str) -> re.Match[str] | None:
    return ACCESS_RE.match(line)


def is_throws(line: str) -> re.Match[str] | None:
    return THROWS_RE.match(line)


def is_todo(line: str) -> re.Match[str] | None:
    return TODO_RE.match(line)


def is_alias(line: str) -> re.Match[str] | None:
    return ALIAS_RE.match(line)


def is_link(line: str) -> re.Match[str] | None:
    return LINK_RE.match(line)


def uncomment(line: str) -> str:
    """Strip comment delimiters from ``line`` and return the remaining text."""
    text = COMMENT_PREFIX_RE.sub("", line, count=1)
    text = COMMENT_SUFFIX_RE.sub("", text)
    return text.rstrip()
