"""Drive a calculator with a stream of commands, the way a keypad UI does."""
from typing import Iterable, List, Optional

from incremental_calculator.common.errors import CalculatorError
from incremental_calculator.common.logger import logger
from incremental_calculator.common.models import SessionResult, StepResult
from incremental_calculator.core.calculator import Calculator
from incremental_calculator.core.commands import Command, CommandParser


class CalculatorSession:
    """
    Feed commands to one calculator and record the current value after each.

    A fault does not end the session: like a user at a keypad, the session
    notes the error and carries on with the next command, the calculator
    being either unchanged or cleared by the fault.
    """

    def __init__(self, calculator: Optional[Calculator] = None) -> None:
        self.calculator: Calculator = calculator if calculator is not None else Calculator()

    def execute(self, command: Command) -> StepResult:
        """
        Issue one command.

        :param Command command: Command to issue

        :return: Current value after the command, and the fault if one was raised
        :rtype: StepResult
        """
        error: Optional[str] = None
        try:
            command.apply(self.calculator)
        except CalculatorError as exc:
            error = f"{type(exc).__name__}: {exc}"
            logger.warning(f"🧮⚠️ '{command}' failed: {error}")

        return StepResult(command=str(command), current=self.calculator.get_current(), error=error)

    def run(self, commands: Iterable[Command], session: str = "") -> SessionResult:
        """
        Issue every command in order.

        :param Iterable[Command] commands: Commands to issue
        :param str session: Session text the commands come from, kept in the result

        :return: Every step and the final current value
        :rtype: SessionResult
        """
        steps: List[StepResult] = [self.execute(command) for command in commands]
        return SessionResult(session=session, result=self.calculator.get_current(), steps=steps)

    def run_line(self, line: str) -> SessionResult:
        """
        Parse and run a session line such as ``value 2; binop +; value 3; compute``.

        :param str line: Session line

        :return: Every step and the final current value
        :rtype: SessionResult
        :raises ValueError: If the line is malformed; no command is issued then
        """
        return self.run(CommandParser.parse(line), session=line)
