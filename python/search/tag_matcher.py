"""
Tag-block scanning over a corpus.

A tag block starts at a line carrying ``[tags]: <> <free text>`` and runs to
the next ``[tags-end]`` marker, or to the end of the corpus when there is
none. Queries are literal, case-sensitive substrings of the free text.
"""

import re
from dataclasses import dataclass
from typing import Iterator

TAG_MARKER = "[tags]: <> "
END_MARKER = "[tags-end]"

_TAG_LINE = re.compile(re.escape(TAG_MARKER) + r"(?P<text>[^\r\n]*)")


@dataclass(frozen=True)
class TagBlock:
    start_offset: int
    tag_line: str
    body: str

    @property
    def tags(self) -> str:
        """The free text after the marker."""
        return self.tag_line[len(TAG_MARKER):]

    @property
    def fragment(self) -> str:
        return self.tag_line + self.body


def _text(corpus) -> str:
    return corpus if isinstance(corpus, str) else str(corpus)


def iter_blocks(corpus) -> Iterator[TagBlock]:
    """Yield every tag block in offset order."""
    text = _text(corpus)
    for match in _TAG_LINE.finditer(text):
        start = match.start()
        end = text.find(END_MARKER, start)
        if end == -1:
            end = len(text)
        # a terminator on the tag line itself cuts the line short
        line_end = min(match.end(), end)
        yield TagBlock(
            start_offset=start,
            tag_line=text[start:line_end],
            body=text[line_end:end],
        )


def find_matches(corpus, query: str) -> Iterator[str]:
    """
    Yield the fragment of every block whose tag text contains `query`.

    Matching is plain substring containment, so regex metacharacters in the
    query have no special meaning. Each call rescans the corpus.
    """
    for block in iter_blocks(corpus):
        if query in block.tags:
            yield block.fragment
