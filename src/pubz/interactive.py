"""Interactive terminal prompts."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from types import TracebackType
from typing import Any, TypeVar

import questionary
from questionary import Style

T = TypeVar("T")


def get_style() -> Style:
    """Style used for every prompt."""
    return Style(
        [
            ("qmark", "fg:#00afaf bold"),  # Cyan question mark
            ("question", "bold"),
            ("answer", "fg:#5faf00 bold"),  # Green answer
            ("pointer", "fg:#00afaf bold"),
            ("highlighted", "fg:#00afaf bold"),
            ("selected", "fg:#5faf00"),  # Checkbox selected
            ("separator", "fg:#808080"),
            ("instruction", "fg:#888888"),  # Gray instructions
        ]
    )


def _safe_ask(fn: Callable[..., Any], *args: Any, on_cancel: Any = None, **kwargs: Any) -> Any:
    """Run a questionary prompt, mapping cancellation to ``on_cancel``.

    Ctrl-C, a prompt that cannot run (no TTY) and a None answer all count
    as cancellation.
    """
    try:
        res = fn(*args, **kwargs).ask()
    except KeyboardInterrupt:
        return on_cancel
    except (EOFError, OSError):
        return on_cancel

    return res if res is not None else on_cancel


class Prompter:
    """Confirm/select/multi-select prompts as an explicitly scoped resource.

    Use as a context manager so it is closed on every exit path::

        with Prompter() as prompter:
            if prompter.confirm("Continue?"):
                ...
    """

    def __init__(self) -> None:
        self._style: Style | None = get_style()

    @property
    def closed(self) -> bool:
        return self._style is None

    def close(self) -> None:
        self._style = None

    def __enter__(self) -> Prompter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _require_open(self) -> Style:
        if self._style is None:
            raise RuntimeError("Prompter is closed")
        return self._style

    def confirm(self, message: str, default: bool = True) -> bool | None:
        """Ask a yes/no question. Returns None if the operator cancels."""
        style = self._require_open()
        answer = _safe_ask(
            questionary.confirm,
            message,
            default=default,
            style=style,
            on_cancel=None,
        )
        return None if answer is None else bool(answer)

    def select(
        self,
        message: str,
        options: Sequence[tuple[str, T]],
        default_index: int = 0,
    ) -> T | None:
        """Pick one value from (label, value) options.

        Returns:
            The chosen value, or None if cancelled.
        """
        style = self._require_open()
        if not options:
            return None

        choices = [questionary.Choice(title=label, value=value) for label, value in options]
        return _safe_ask(
            questionary.select,
            message,
            choices=choices,
            default=choices[default_index],
            style=style,
            use_indicator=True,
            on_cancel=None,
        )

    def multi_select(
        self,
        message: str,
        options: Sequence[tuple[str, T]],
        all_selected: bool = True,
    ) -> list[T]:
        """Pick any number of values from (label, value) options.

        Returns:
            Chosen values in option order; empty if cancelled.
        """
        style = self._require_open()
        if not options:
            return []

        choices = [
            questionary.Choice(title=label, value=value, checked=all_selected)
            for label, value in options
        ]
        selected = _safe_ask(
            questionary.checkbox,
            message,
            choices=choices,
            style=style,
            instruction="(Space to toggle, a to toggle all, Enter to confirm)",
            on_cancel=[],
        )
        picked = list(selected or [])
        return [value for _, value in options if value in picked]
