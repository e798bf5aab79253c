"""
Interactive prompts for first-run setup and the query loop.

Setup is a short, fixed sequence of typed prompts: each answer is collected,
validated, and only then is the next prompt shown.
"""

import urllib.parse
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from colored_logger import get_colored_logger
from sync.reference import RepositoryReference

logger = get_colored_logger(__name__)

POINTER = "❯"


@dataclass(frozen=True)
class Prompt:
    key: str
    message: str
    choices: Tuple[str, ...] = ()
    # returns an error message, or None when the answer is acceptable
    validator: Optional[Callable[[str], Optional[str]]] = None


def validate_repo_url(answer: str) -> Optional[str]:
    parsed = urllib.parse.urlparse(answer)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return "Please enter a full http(s) URL, e.g. https://github.com/you/notes"
    return None


URL_PROMPT = Prompt(
    key="repo_url",
    message="Type github stock url: ",
    validator=validate_repo_url,
)
PRIVATE_PROMPT = Prompt(
    key="is_private",
    message='Is your repository private?: (Type "y" if yes or "n" if no) ',
    choices=("y", "n"),
)
TOKEN_PROMPT = Prompt(
    key="token",
    message="Type your personal authorization token: ",
)


class PromptSession:
    """Reads answers from the terminal. EOFError and KeyboardInterrupt propagate."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _read(self, message: str, password: bool = False) -> str:
        return self.console.input(
            f"[yellow]{escape(message)}[/yellow]", password=password
        )

    def ask(self, prompt: Prompt, password: bool = False) -> str:
        """Ask until the answer is non-empty and valid."""
        while True:
            answer = self._read(prompt.message, password=password).strip()
            if not answer:
                logger.error("No input provided. Try again.")
                continue

            if prompt.choices:
                answer = answer.lower()
                if answer not in prompt.choices:
                    logger.error("Please answer one of: %s", ", ".join(prompt.choices))
                    continue

            if prompt.validator is not None:
                error = prompt.validator(answer)
                if error:
                    logger.error("%s", error)
                    continue

            return answer

    def read_query(self) -> str:
        """Read one query verbatim; may be empty."""
        return self._read(f"{POINTER} ")


def collect_repository_reference(session: PromptSession) -> RepositoryReference:
    """Run the setup prompts and build the reference they describe."""
    url = session.ask(URL_PROMPT)
    is_private = session.ask(PRIVATE_PROMPT) == "y"
    token = session.ask(TOKEN_PROMPT, password=True) if is_private else None
    return RepositoryReference(url=url, token=token)
