"""Operations understood by the calculator, with their precedence and arithmetic."""
from collections.abc import Callable as ABCCallable
from enum import Enum
import operator
from typing import Callable, Dict, Optional, Tuple

from incremental_calculator.common.errors import DivisionByZeroError, InvalidOperatorError
from incremental_calculator.common.intmath import wrap_int64


# Type alias for operator functions (taking two integers, returning an integer)
OperatorFn: ABCCallable[[int, int], int] = Callable[[int, int], int]


def _divide(left: int, right: int) -> int:
    """Integer division truncating toward zero."""
    if right == 0:
        raise DivisionByZeroError(f"division by zero: {left} / 0")
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


class Operation(Enum):
    """
    Tokens of the operator stack.

    The parentheses are markers, not arithmetic: they have the lowest precedence
    so that draining pending work always stops at a scope boundary.
    Binary operations follow the usual order, multiplicative above additive.
    """

    LPAREN = "("
    RPAREN = ")"
    PLUS = "+"
    MINUS = "-"
    TIMES = "*"
    DIVIDE = "/"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def precedence(self) -> int:
        return _TABLE[self][0]

    @property
    def is_binary(self) -> bool:
        return _TABLE[self][1] is not None

    def apply(self, left: int, right: int) -> int:
        """
        Apply the operation with 64-bit wrap-around.

        :param int left: Left operand
        :param int right: Right operand

        :return: Result wrapped into the signed 64-bit range
        :rtype: int
        :raises InvalidOperatorError: If the operation is a parenthesis
        :raises DivisionByZeroError: If dividing by zero
        """
        fn = _TABLE[self][1]
        if fn is None:
            raise InvalidOperatorError(f"{self.name} is not a binary operation")
        return wrap_int64(fn(left, right))

    @classmethod
    def from_symbol(cls, text: str) -> "Operation":
        """
        Look up an operation by symbol (``+``) or name (``plus``).

        :param str text: Symbol or case-insensitive member name

        :return: The matching operation
        :rtype: Operation
        :raises ValueError: If nothing matches
        """
        token = text.strip()
        for op in cls:
            if token == op.value or token.upper() == op.name:
                return op
        raise ValueError(f"Unknown operation: {text!r}")

    def __str__(self) -> str:
        return self.value


# Mapping of operations to (precedence, function); markers have no function
_TABLE: Dict[Operation, Tuple[int, Optional[OperatorFn]]] = {
    Operation.LPAREN: (0, None),
    Operation.RPAREN: (0, None),
    Operation.PLUS: (1, operator.add),
    Operation.MINUS: (1, operator.sub),
    Operation.TIMES: (2, operator.mul),
    Operation.DIVIDE: (2, _divide),
}
