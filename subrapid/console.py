import logging

from rich.console import Console
from rich.logging import RichHandler

# progress and diagnostics go to stderr, results to stdout
console = Console(stderr=True)
out_console = Console()


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
