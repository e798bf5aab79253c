"""
Corpus loading and tag matching over the local mirror.

Key Components:
- load_corpus: Concatenates mirrored files into one searchable string
- iter_blocks / find_matches: Tag-block extraction and query filtering
"""

from .content_loader import Corpus, SourceSpan, load_corpus
from .tag_matcher import TagBlock, iter_blocks, find_matches, TAG_MARKER, END_MARKER

__all__ = [
    "Corpus",
    "SourceSpan",
    "load_corpus",
    "TagBlock",
    "iter_blocks",
    "find_matches",
    "TAG_MARKER",
    "END_MARKER",
]
