"""
Console user interface - prompts and user-facing messages.
"""

import sys
from typing import Callable, Optional, Protocol, TextIO


class UI(Protocol):
    """Interaction points used by the commands."""

    def confirm(self, message: str) -> bool:
        ...

    def ask_input(self, message: str) -> str:
        ...

    def select(self, message: str, options: list[str]) -> str:
        ...

    def multiselect(
        self,
        message: str,
        options: list[str],
        default_all: bool = False,
        filterable: bool = True
    ) -> list[str]:
        ...

    def info(self, message: str) -> None:
        ...

    def success(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...


class ConsoleUI:
    """Plain terminal implementation of UI."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Optional[TextIO] = None
    ):
        self._input = input_func
        self._output = output or sys.stdout

    def _print(self, prefix: str, message: str) -> None:
        print(f"{prefix} {message}", file=self._output)

    def info(self, message: str) -> None:
        self._print("INFO:", message)

    def success(self, message: str) -> None:
        self._print("SUCCESS:", message)

    def warning(self, message: str) -> None:
        self._print("WARNING:", message)

    def error(self, message: str) -> None:
        self._print("ERROR:", message)

    def confirm(self, message: str) -> bool:
        answer = self._input(f"{message} [y/N] ").strip().lower()
        return answer in ("y", "yes")

    def ask_input(self, message: str) -> str:
        return self._input(f"{message}: ").strip()

    def _show_options(self, message: str, options: list[str]) -> None:
        print(message, file=self._output)
        for index, option in enumerate(options, start=1):
            print(f"  {index}. {option}", file=self._output)

    def _parse_choice(self, token: str, options: list[str]) -> Optional[str]:
        token = token.strip()
        if token.isdigit() and 1 <= int(token) <= len(options):
            return options[int(token) - 1]
        if token in options:
            return token
        return None

    def select(self, message: str, options: list[str]) -> str:
        """Pick one option by number or name. Blank answer selects nothing."""
        if not options:
            return ""
        self._show_options(message, options)
        while True:
            answer = self._input("Selection: ").strip()
            if not answer:
                return ""
            choice = self._parse_choice(answer, options)
            if choice is not None:
                return choice
            self.warning(f"Invalid selection: {answer}")

    def multiselect(
        self,
        message: str,
        options: list[str],
        default_all: bool = False,
        filterable: bool = True
    ) -> list[str]:
        """
        Pick several options, comma separated.

        A blank answer keeps the default selection. With `filterable`, an
        answer starting with `/` selects every option containing the text.
        """
        if not options:
            return []
        self._show_options(message, options)
        default = "all" if default_all else "none"
        answer = self._input(f"Selection (comma separated, default {default}): ").strip()

        if not answer:
            return list(options) if default_all else []
        if answer.lower() == "all":
            return list(options)
        if filterable and answer.startswith("/"):
            pattern = answer[1:].lower()
            return [option for option in options if pattern in option.lower()]

        selected = []
        for token in answer.split(","):
            choice = self._parse_choice(token, options)
            if choice is None:
                self.warning(f"Ignoring invalid selection: {token.strip()}")
            elif choice not in selected:
                selected.append(choice)
        return selected
