"""Calculator commands and the line protocol used to store and replay them."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from incremental_calculator.common.intmath import INT64_MAX, INT64_MIN
from incremental_calculator.common.operation import Operation
from incremental_calculator.core.calculator import Calculator

# Separator between the commands of a session line
COMMAND_SEPARATOR = ";"


class CommandKind(str, Enum):
    """One entry per public calculator command."""

    VALUE = "value"
    OPEN = "open"
    CLOSE = "close"
    BINOP = "binop"
    SQRT = "sqrt"
    COMPUTE = "compute"
    CLEAR = "clear"
    CURRENT = "current"


class Command(BaseModel):
    """A single calculator command, with its argument when it takes one."""

    # Commands are replayed as-is, they must not change afterwards
    model_config = ConfigDict(frozen=True)

    kind: CommandKind = Field(..., description="Calculator command to issue")
    operand: Optional[int] = Field(
        default=None, ge=INT64_MIN, le=INT64_MAX, description="Value entered by a 'value' command"
    )
    operator: Optional[Operation] = Field(default=None, description="Operation started by a 'binop' command")

    @model_validator(mode="after")
    def arguments_match_kind(self) -> "Command":
        """Ensure value carries an operand, binop an operator, and nothing else carries either."""
        if (self.kind is CommandKind.VALUE) != (self.operand is not None):
            raise ValueError(f"'{self.kind.value}' command with operand {self.operand!r}")
        if (self.kind is CommandKind.BINOP) != (self.operator is not None):
            raise ValueError(f"'{self.kind.value}' command with operator {self.operator!r}")
        return self

    def apply(self, calculator: Calculator) -> Optional[int]:
        """
        Issue the command to a calculator.

        :param Calculator calculator: Calculator receiving the command

        :return: The command's result for compute and current, else None
        :rtype: Optional[int]
        :raises CalculatorError: Whatever the calculator raises
        """
        if self.kind is CommandKind.VALUE:
            return calculator.value(self.operand)
        if self.kind is CommandKind.BINOP:
            return calculator.binop(self.operator)
        if self.kind is CommandKind.OPEN:
            return calculator.open()
        if self.kind is CommandKind.CLOSE:
            return calculator.close()
        if self.kind is CommandKind.SQRT:
            return calculator.sqrt()
        if self.kind is CommandKind.COMPUTE:
            return calculator.compute()
        if self.kind is CommandKind.CLEAR:
            return calculator.clear()
        return calculator.get_current()

    def __str__(self) -> str:
        if self.kind is CommandKind.VALUE:
            return f"value {self.operand}"
        if self.kind is CommandKind.BINOP:
            return f"binop {self.operator.symbol}"
        return self.kind.value


class CommandParser:
    """
    Parse session lines into calculator commands.

    A session line holds commands separated by ';', for example
    ``value 2; binop +; value 3; compute``. This is a command protocol,
    not an expression syntax: every keypress is spelled out.
    """

    @staticmethod
    def tokenize(line: str) -> List[str]:
        """
        Split a session line into command strings.

        Empty commands, such as after a trailing ';', are dropped.

        :param str line: Session line

        :return: List of stripped, non-empty command strings
        :rtype: List[str]
        """
        return [part.strip() for part in line.split(COMMAND_SEPARATOR) if part.strip()]

    @staticmethod
    def parse_command(text: str) -> Command:
        """
        Parse one command string.

        :param str text: Command such as ``value 5`` or ``binop *``

        :return: Parsed command
        :rtype: Command
        :raises ValueError: If the command is unknown or its argument is wrong
        """
        words: List[str] = text.split()
        if not words:
            raise ValueError("Empty command")

        try:
            kind = CommandKind(words[0].lower())
        except ValueError:
            raise ValueError(f"Unknown command: {words[0]!r}") from None

        args: List[str] = words[1:]
        expected_args = 1 if kind in (CommandKind.VALUE, CommandKind.BINOP) else 0
        if len(args) != expected_args:
            raise ValueError(f"'{kind.value}' takes {expected_args} argument(s), got {len(args)}: {text!r}")

        # pydantic's ValidationError is a ValueError, so range errors surface the same way
        if kind is CommandKind.VALUE:
            try:
                operand = int(args[0])
            except ValueError:
                raise ValueError(f"Not an integer: {args[0]!r}") from None
            return Command(kind=kind, operand=operand)
        if kind is CommandKind.BINOP:
            return Command(kind=kind, operator=Operation.from_symbol(args[0]))
        return Command(kind=kind)

    @staticmethod
    def parse(line: str) -> List[Command]:
        """
        Parse a whole session line.

        :param str line: Session line

        :return: Commands in the order they are to be issued
        :rtype: List[Command]
        :raises ValueError: If the line holds no command or a malformed one
        """
        tokens: List[str] = CommandParser.tokenize(line)
        if not tokens:
            raise ValueError("Empty session")
        return [CommandParser.parse_command(token) for token in tokens]
