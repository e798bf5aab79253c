from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.text import Text

BANNER_TITLE = "Stock"
SPINNER = "dots"


class FragmentRenderer:
    """Terminal output for stock: banner, spinner and markdown fragments."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def banner(self) -> None:
        self.console.clear()
        self.console.rule(Text(BANNER_TITLE, style="bold yellow"), style="yellow")

    def render(self, fragment: str) -> None:
        self.console.print(Markdown(fragment))

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        with self.console.status(message, spinner=SPINNER):
            yield
