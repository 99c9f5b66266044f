"""Harvest documentation records from annotated stylesheet sources."""
from __future__ import annotations

from . import manifest, parser, patterns, renderer
from .parser import DocRecord, SourceDoc, parse_file

__all__ = [
    "patterns",
    "parser",
    "manifest",
    "renderer",
    "DocRecord",
    "SourceDoc",
    "parse_file",
]
