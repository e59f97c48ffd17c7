"""Operator interaction.

Waits that depend on the operator (placing downloads, placing a ROM,
replacing a bad ROM) run through OperatorGate: a small state machine that
polls a predicate and reads one line of input per iteration until the
predicate holds or the operator types a cancel letter. The predicate and
the input source are injected so the loops run without a terminal.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from enum import Enum

import structlog
from rich.console import Console

from starship_setup.core.errors import OperationCancelled

logger = structlog.get_logger()

CANCEL_PATTERN = re.compile(r"[cCxX]")
CONFIRM_PATTERN = re.compile(r"[yY]")

CANCEL_HINT = "type 'c'/'x' to exit"


def is_cancel(answer: str) -> bool:
    """Whether an input line is a cancel request (exactly one of c, C, x, X)."""
    return CANCEL_PATTERN.fullmatch(answer) is not None


def is_confirm(answer: str) -> bool:
    """Whether an input line is an explicit yes (exactly y or Y)."""
    return CONFIRM_PATTERN.fullmatch(answer) is not None


class GateState(Enum):
    """State of an operator gate."""

    waiting = "waiting"
    satisfied = "satisfied"
    cancelled = "cancelled"


class OperatorGate:
    """Block until a condition holds or the operator cancels.

    Args:
        predicate: Returns True once the awaited condition holds
        read_line: Reads one line of operator input for a prompt
        prompt: Prompt text, or a callable producing it per iteration
        on_waiting: Called before each prompt, typically to show status
        cancel_error: Exception type raised by wait() on cancellation
        name: Label used in log events
    """

    def __init__(
        self,
        predicate: Callable[[], bool],
        read_line: Callable[[str], str],
        prompt: str | Callable[[], str],
        on_waiting: Callable[[], None] | None = None,
        cancel_error: type[OperationCancelled] = OperationCancelled,
        name: str = "gate",
    ) -> None:
        self.predicate = predicate
        self.read_line = read_line
        self.prompt = prompt
        self.on_waiting = on_waiting
        self.cancel_error = cancel_error
        self.name = name
        self.state = GateState.waiting
        self.attempts = 0

    def _prompt_text(self) -> str:
        return self.prompt() if callable(self.prompt) else self.prompt

    def step(self) -> GateState:
        """Run one iteration: check the predicate, otherwise read one line."""
        if self.state is not GateState.waiting:
            return self.state

        if self.predicate():
            self.state = GateState.satisfied
            logger.debug("gate_satisfied", gate=self.name, attempts=self.attempts)
            return self.state

        if self.on_waiting is not None:
            self.on_waiting()

        self.attempts += 1
        try:
            answer = self.read_line(self._prompt_text())
        except EOFError:
            # Closed input can never satisfy the gate
            self.state = GateState.cancelled
            logger.debug("gate_input_closed", gate=self.name)
            return self.state

        if is_cancel(answer.strip()):
            self.state = GateState.cancelled
            logger.info("gate_cancelled", gate=self.name, attempts=self.attempts)

        return self.state

    def wait(self) -> None:
        """Step until satisfied.

        Raises:
            OperationCancelled: (or ``cancel_error``) if the operator cancels
        """
        while self.step() is GateState.waiting:
            pass

        if self.state is GateState.cancelled:
            raise self.cancel_error("Operation canceled by the user.")


class Operator:
    """Terminal-facing side of the installer.

    Args:
        console: Rich console for output
        read_line: Input source; defaults to ``console.input``
    """

    def __init__(
        self,
        console: Console,
        read_line: Callable[[str], str] | None = None,
    ) -> None:
        self.console = console
        self.read_line = read_line or self._console_input

    def _console_input(self, prompt: str) -> str:
        return self.console.input(prompt, markup=False)

    def say(self, message: str) -> None:
        self.console.print(message)

    def ask(self, prompt: str, default: str = "") -> str:
        """Read one line, returning ``default`` for empty input."""
        answer = self.read_line(prompt).strip()
        return answer or default

    def confirm(self, prompt: str) -> bool:
        """Ask a yes/no question; anything but y/Y means no."""
        try:
            answer = self.read_line(prompt)
        except EOFError:
            return False
        return is_confirm(answer.strip())

    def gate(
        self,
        predicate: Callable[[], bool],
        prompt: str | Callable[[], str],
        on_waiting: Callable[[], None] | None = None,
        cancel_error: type[OperationCancelled] = OperationCancelled,
        name: str = "gate",
    ) -> OperatorGate:
        """Create an OperatorGate reading from this operator's input."""
        return OperatorGate(
            predicate,
            self.read_line,
            prompt,
            on_waiting=on_waiting,
            cancel_error=cancel_error,
            name=name,
        )
