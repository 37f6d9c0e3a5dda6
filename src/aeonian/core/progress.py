"""Progress indicator utilities for deployment runs."""

from typing import Protocol

from rich.console import Console
from rich.status import Status


class ProgressReporter(Protocol):
    """Receives step and percentage notifications from a deployment.

    Reporters are advisory: nothing they do may change the outcome of
    the run.
    """

    def start(self, message: str) -> None:
        """A new step has begun."""
        ...

    def progress(self, percent: float, message: str) -> None:
        """The current step is percent (0-100) complete."""
        ...

    def succeed(self, message: str | None = None) -> None:
        """The current step finished successfully."""
        ...

    def info(self, message: str | None = None) -> None:
        """The current step finished with something worth pointing out."""
        ...

    def fail(self, message: str) -> None:
        """The current step failed."""
        ...


class NullProgressReporter:
    """Reporter that discards everything."""

    def start(self, message: str) -> None:
        pass

    def progress(self, percent: float, message: str) -> None:
        pass

    def succeed(self, message: str | None = None) -> None:
        pass

    def info(self, message: str | None = None) -> None:
        pass

    def fail(self, message: str) -> None:
        pass


class RichProgressReporter:
    """Spinner-style reporter.

    One spinner line shows the running step; finished steps are printed
    above it with a status icon.
    """

    def __init__(self, console: Console | None = None, spinner: str = "dots"):
        """Initialize the reporter.

        Args:
            console: Rich console to use for output
            spinner: Spinner style to use
        """
        self._console = console or Console()
        self._spinner = spinner
        self._status: Status | None = None
        self._text = ""

    def start(self, message: str) -> None:
        self._set_text(message)

    def progress(self, percent: float, message: str) -> None:
        self._set_text(f"{percent:05.2f}% {message}")

    def succeed(self, message: str | None = None) -> None:
        self._finish("[green]✓[/green]", message)

    def info(self, message: str | None = None) -> None:
        self._finish("[blue]ℹ[/blue]", message)

    def fail(self, message: str) -> None:
        self._finish("[red]✗[/red]", message)

    def close(self) -> None:
        """Stop the spinner if one is still running."""
        if self._status is not None:
            self._status.stop()
            self._status = None

    def _set_text(self, text: str) -> None:
        self._text = text
        if self._status is None:
            self._status = self._console.status(text, spinner=self._spinner)
            self._status.start()
        else:
            self._status.update(text)

    def _finish(self, icon: str, message: str | None) -> None:
        self.close()
        text = message or self._text
        if text:
            self._console.print(f"{icon} {text}")
        self._text = ""
