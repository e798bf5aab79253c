import argparse
from typing import List, Optional, Sequence

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)


class CommandLineArgs:
    """
    Parses the stock command line.

    Positional words form a one-shot tag query, kept verbatim; with none,
    stock drops into the interactive prompt.
    """

    def __init__(self, argv: Optional[Sequence[str]] = None) -> None:
        self.parser = argparse.ArgumentParser(
            prog="stock",
            description="Query a local mirror of your markdown notes by tag.",
        )
        self.parser.add_argument(
            "tags",
            nargs="*",
            help="Tag text to search for. Words are joined with spaces.",
        )
        self.parser.add_argument(
            "--update",
            action="store_true",
            help="Re-download the mirror from the configured repository first.",
        )
        self.parser.add_argument(
            "--home",
            type=str,
            default=None,
            help="State directory holding the mirror (default: ~/.stock).",
        )
        self.parser.add_argument(
            "--timeout",
            type=float,
            default=None,
            help="Network timeout in seconds for the archive download.",
        )
        self.parser.add_argument(
            "-v",
            "--verbose",
            action="store_true",
            help="Enable debug logging.",
        )

        self.args = self.parser.parse_args(argv)

        self.tag_words: List[str] = list(self.args.tags)
        self.update: bool = self.args.update
        self.home: Optional[str] = self.args.home
        self.timeout: Optional[float] = self.args.timeout
        self.verbose: bool = self.args.verbose

        logger.debug("Parsed %d tag word(s), update=%s", len(self.tag_words), self.update)

    @property
    def has_query(self) -> bool:
        return bool(self.tag_words)

    @property
    def query(self) -> str:
        return " ".join(self.tag_words)
