"""Interactive prompts with explicit cancellation outcomes."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

__all__ = ["Answer", "Cancelled", "PromptOutcome", "Prompter"]

T = TypeVar("T")

_YES = {"y", "yes"}
_NO = {"n", "no"}


@dataclass(frozen=True, slots=True)
class Answer(Generic[T]):
    """Value supplied by the user."""

    value: T


@dataclass(frozen=True, slots=True)
class Cancelled:
    """The user interrupted the prompt or closed standard input."""

    reason: str = "interrupted"


PromptOutcome = Answer[T] | Cancelled


class Prompter:
    """Ask questions on the terminal.

    ``input_func`` defaults to :func:`input`; tests substitute a scripted
    callable. Interrupts and end-of-input are reported as :class:`Cancelled`
    instead of propagating, leaving the caller to decide how to abort.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[[str], None] = print,
    ) -> None:
        self._input = input_func
        self._output = output_func

    def _read(self, message: str) -> str | Cancelled:
        try:
            return self._input(message)
        except KeyboardInterrupt:
            self._output("")
            return Cancelled("interrupted")
        except EOFError:
            self._output("")
            return Cancelled("end of input")

    def text(
        self,
        message: str,
        *,
        default: str = "",
        validate: Callable[[str], bool | str] | None = None,
    ) -> PromptOutcome[str]:
        """Ask for a line of text, re-prompting until ``validate`` accepts it.

        ``validate`` returns ``True`` to accept a value or an error message to
        show before asking again. An empty answer selects ``default``.
        """

        suffix = f" ({default})" if default else ""
        while True:
            raw = self._read(f"{message}{suffix} ")
            if isinstance(raw, Cancelled):
                return raw
            value = raw if raw.strip() else default
            verdict = True if validate is None else validate(value)
            if verdict is True:
                return Answer(value)
            self._output(verdict if isinstance(verdict, str) else "Invalid value")

    def confirm(self, message: str, *, default: bool = False) -> PromptOutcome[bool]:
        """Ask a yes/no question; an empty answer selects ``default``."""

        hint = "Y/n" if default else "y/N"
        while True:
            raw = self._read(f"{message} ({hint}) ")
            if isinstance(raw, Cancelled):
                return raw
            answer = raw.strip().lower()
            if not answer:
                return Answer(default)
            if answer in _YES:
                return Answer(True)
            if answer in _NO:
                return Answer(False)
            self._output("Please answer yes or no.")
