"""
Builds the searchable corpus from the mirror directory.

Every regular file is read as bytes and decoded permissively, so a stray
binary or mis-encoded file costs a warning instead of the whole load.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from colored_logger import get_colored_logger
from io_ops.file_scanner import FileScanner, FileStats
from sync.errors import DecodeWarning

logger = get_colored_logger(__name__)

REPLACEMENT_CHAR = "\ufffd"


@dataclass(frozen=True)
class SourceSpan:
    """Where one file's text sits inside the corpus."""

    path: Path
    start: int
    end: int


@dataclass
class Corpus:
    text: str = ""
    files: List[SourceSpan] = field(default_factory=list)
    stats: FileStats = field(default_factory=FileStats)
    decode_warnings: List[DecodeWarning] = field(default_factory=list)

    def __str__(self) -> str:
        return self.text

    def __len__(self) -> int:
        return len(self.text)

    def source_at(self, offset: int) -> Optional[Path]:
        """Return the file whose text covers `offset`, if any."""
        for span in self.files:
            if span.start <= offset < span.end:
                return span.path
        return None


def decode_permissive(data: bytes):
    """
    Decode UTF-8, replacing undecodable sequences.

    Returns (text, replaced) where replaced counts the substituted sequences.
    """
    text = data.decode("utf-8", errors="replace")
    if REPLACEMENT_CHAR not in text:
        return text, 0
    # U+FFFD can legitimately appear in the source; only count the new ones
    genuine = data.decode("utf-8", errors="ignore").count(REPLACEMENT_CHAR)
    return text, text.count(REPLACEMENT_CHAR) - genuine


def load_corpus(mirror_root: Path, exclude: Iterable[Path] = ()) -> Corpus:
    """
    Concatenate the text of every file under mirror_root.

    Files are joined without separators in scan order. A missing or empty
    root gives an empty corpus.
    """
    scanner = FileScanner(exclude=exclude)
    corpus = Corpus()
    parts: List[str] = []
    offset = 0

    for path in scanner.scan_directory(Path(mirror_root)):
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning("Cannot read %s, skipping: %s", path, e)
            corpus.stats.error_file()
            continue

        text, replaced = decode_permissive(data)
        if replaced:
            warning = DecodeWarning(path, replaced)
            corpus.decode_warnings.append(warning)
            logger.warning("%s", warning)

        if not text:
            corpus.stats.skip_file()
            continue

        parts.append(text)
        corpus.files.append(SourceSpan(path, offset, offset + len(text)))
        corpus.stats.add_file(len(data))
        offset += len(text)

    corpus.text = "".join(parts)
    logger.debug(
        "Corpus loaded: %d file(s), %d character(s), %d decode warning(s)",
        corpus.stats.total_files,
        len(corpus.text),
        len(corpus.decode_warnings),
    )
    return corpus
