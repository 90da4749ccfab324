"""Test class Command and class CommandParser."""
from pydantic import ValidationError
import pytest

from incremental_calculator.common.intmath import INT64_MAX
from incremental_calculator.common.operation import Operation
from incremental_calculator.core.calculator import Calculator
from incremental_calculator.core.commands import Command, CommandKind, CommandParser


def test_command_valid() -> None:
    """Commands carry exactly the argument their kind needs."""
    assert Command(kind="value", operand=5).operand == 5
    assert Command(kind="binop", operator="*").operator is Operation.TIMES
    assert Command(kind=CommandKind.SQRT).kind is CommandKind.SQRT


@pytest.mark.parametrize("kwargs", [
    {"kind": "value"},
    {"kind": "binop"},
    {"kind": "open", "operand": 3},
    {"kind": "compute", "operator": "+"},
    {"kind": "value", "operand": 1, "operator": "+"},
    {"kind": "value", "operand": INT64_MAX + 1},
    {"kind": "binop", "operator": "%"},
    {"kind": "jump"},
])
def test_command_invalid(kwargs) -> None:
    """Mismatched or out-of-range arguments raise a validation error."""
    with pytest.raises(ValidationError):
        Command(**kwargs)


def test_command_is_frozen() -> None:
    """Commands cannot be changed once built."""
    command = Command(kind="value", operand=1)
    with pytest.raises(ValidationError):
        command.operand = 2


@pytest.mark.parametrize("command,text", [
    (Command(kind="value", operand=-3), "value -3"),
    (Command(kind="binop", operator=Operation.DIVIDE), "binop /"),
    (Command(kind="close"), "close"),
])
def test_command_str_round_trips(command: Command, text: str) -> None:
    """str() renders a command in protocol syntax that parses back to it."""
    assert str(command) == text
    assert CommandParser.parse_command(text) == command


def test_command_apply() -> None:
    """apply issues the command and returns what the calculator returns."""
    calc = Calculator()
    assert Command(kind="value", operand=6).apply(calc) is None
    Command(kind="binop", operator="*").apply(calc)
    Command(kind="open").apply(calc)
    Command(kind="value", operand=2).apply(calc)
    Command(kind="close").apply(calc)
    assert Command(kind="current").apply(calc) == 2
    assert Command(kind="compute").apply(calc) == 12
    Command(kind="sqrt").apply(calc)
    assert calc.get_current() == 3
    Command(kind="clear").apply(calc)
    assert calc.get_current() == 0


def test_tokenize_basic() -> None:
    """tokenize splits a session line on ';' and drops empty commands."""
    line = " value 3 ; binop + ;value 4;; compute; "
    assert CommandParser.tokenize(line) == ["value 3", "binop +", "value 4", "compute"]


@pytest.mark.parametrize("text,expected", [
    ("value 42", Command(kind="value", operand=42)),
    ("VALUE -7", Command(kind="value", operand=-7)),
    ("binop plus", Command(kind="binop", operator="+")),
    ("binop (", Command(kind="binop", operator="(")),
    ("  open ", Command(kind="open")),
    ("Compute", Command(kind="compute")),
])
def test_parse_command_valid(text: str, expected: Command) -> None:
    """parse_command reads keywords case-insensitively."""
    assert CommandParser.parse_command(text) == expected


@pytest.mark.parametrize("text", [
    "",
    "jump",
    "value",
    "value 1 2",
    "value abc",
    "value 1.5",
    "value 99999999999999999999",
    "binop",
    "binop %",
    "open 3",
])
def test_parse_command_invalid(text: str) -> None:
    """parse_command raises ValueError for malformed commands."""
    with pytest.raises(ValueError):
        CommandParser.parse_command(text)


def test_parse_session() -> None:
    """parse returns the commands of a line in order."""
    commands = CommandParser.parse("value 2; binop +; value 3; compute")
    assert [command.kind for command in commands] == [
        CommandKind.VALUE,
        CommandKind.BINOP,
        CommandKind.VALUE,
        CommandKind.COMPUTE,
    ]


@pytest.mark.parametrize("line", ["", " ; ;", "value 2; fly"])
def test_parse_session_invalid(line: str) -> None:
    """parse raises ValueError for empty or malformed sessions."""
    with pytest.raises(ValueError):
        CommandParser.parse(line)


class RecordingCalculator:
    """Calculator stand-in recording which method each command calls."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        def method(*args):
            self.calls.append((name, args))
            return 0
        return method


@pytest.mark.parametrize("command,expected_call", [
    (Command(kind="value", operand=4), ("value", (4,))),
    (Command(kind="binop", operator="-"), ("binop", (Operation.MINUS,))),
    (Command(kind="open"), ("open", ())),
    (Command(kind="close"), ("close", ())),
    (Command(kind="sqrt"), ("sqrt", ())),
    (Command(kind="compute"), ("compute", ())),
    (Command(kind="clear"), ("clear", ())),
    (Command(kind="current"), ("get_current", ())),
])
def test_command_apply_calls_matching_method(command: Command, expected_call) -> None:
    """Every command kind calls exactly one calculator method, with its argument."""
    calc = RecordingCalculator()
    command.apply(calc)
    assert calc.calls == [expected_call]


def test_every_kind_is_dispatched() -> None:
    """No command kind is left without a calculator method."""
    covered = {
        CommandKind.VALUE, CommandKind.BINOP, CommandKind.OPEN, CommandKind.CLOSE,
        CommandKind.SQRT, CommandKind.COMPUTE, CommandKind.CLEAR, CommandKind.CURRENT,
    }
    assert set(CommandKind) == covered
