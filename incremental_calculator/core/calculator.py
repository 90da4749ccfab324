"""Online integer calculator driven by method calls."""
from enum import Enum

from incremental_calculator.common.errors import (
    DivisionByZeroError,
    EmptyScopeError,
    InvalidOperatorError,
    InvalidStateError,
    InvalidValueError,
    UnbalancedScopeError,
)
from incremental_calculator.common.intmath import is_int64, isqrt
from incremental_calculator.common.logger import logger
from incremental_calculator.common.operation import Operation
from incremental_calculator.common.stack import Stack


class CalculatorState(Enum):
    """Which commands a calculator currently accepts."""

    CLEAR = "clear"  # nothing pending
    READY = "ready"  # a value is available
    WAITING = "waiting"  # an operator or open was entered, a value must follow


class Calculator:
    """
    Perform integer calculations online, one command at a time.

    Commands are entered as they would be typed on a calculator keypad and the
    current value is correct after every command, not only at the end.
    Normal operator precedence applies, with left associativity.

    Algorithm:
        - Operands and operators wait on two stacks, shunting-yard style.
        - Entering an operator first reduces every pending operator of the
          same or higher precedence, so only lower-precedence work waits.
        - An open marker on the operator stack isolates its scope until the
          matching close, or until compute closes it implicitly.
        - When no operand is pending, the default value (the result of the
          last computation, or 0) serves as the left operand.

    A division by zero clears the calculator completely before the error is raised.
    Any other fault leaves the calculator exactly as it was, except an unbalanced
    close which first folds the dangling work.

    Example:
        >>> calc = Calculator()
        >>> calc.value(2); calc.binop(Operation.PLUS); calc.value(3)
        >>> calc.binop(Operation.TIMES); calc.value(4)
        >>> calc.compute()
        14
    """

    def __init__(self) -> None:
        """Create a calculator in the "clear" state with 0 as the default value."""
        self._operands: Stack[int] = Stack()
        self._operators: Stack[Operation] = Stack()
        self._default_value: int = 0
        self._state: CalculatorState = CalculatorState.CLEAR

    @property
    def state(self) -> CalculatorState:
        """Which commands are currently accepted."""
        return self._state

    @property
    def default_value(self) -> int:
        """Result carried over from the last computation, used when no operand is pending."""
        return self._default_value

    @property
    def current(self) -> int:
        """Current value, same as get_current()."""
        return self.get_current()

    def _require_not(self, state: CalculatorState, command: str) -> None:
        """Raise InvalidStateError if the calculator is in the given state."""
        if self._state is state:
            raise InvalidStateError(f"{command}() is not allowed while {state.value}")

    def value(self, x: int) -> None:
        """
        Enter a value. The current value becomes x.

        Pre: not "Ready". Post: "Ready".

        :param int x: Signed 64-bit value to enter

        :raises InvalidStateError: If a value is already available
        :raises InvalidValueError: If x is not a signed 64-bit integer
        """
        self._require_not(CalculatorState.READY, "value")
        if not is_int64(x):
            raise InvalidValueError(f"Not a signed 64-bit integer: {x!r}")

        self._operands.push(x)
        self._state = CalculatorState.READY

    def open(self) -> None:
        """
        Start a parenthetical expression.

        Pre: not "Ready". Post: "Waiting".

        :raises InvalidStateError: If a value is already available
        """
        self._require_not(CalculatorState.READY, "open")

        self._operators.push(Operation.LPAREN)
        self._state = CalculatorState.WAITING

    def close(self) -> None:
        """
        End a parenthetical expression. The current value becomes its result.

        Pre: "Ready". Post: "Ready".

        :raises InvalidStateError: If no value is available
        :raises EmptyScopeError: If there is no pending operator at all
        :raises UnbalancedScopeError: If no open matches; the pending work is folded first
        :raises DivisionByZeroError: If a reduction divides by zero; the calculator is cleared
        """
        if self._state is not CalculatorState.READY:
            raise InvalidStateError(f"close() is not allowed while {self._state.value}")
        if self._operators.is_empty():
            raise EmptyScopeError("close() without any pending open")

        op = self._operators.pop()
        while op is not Operation.LPAREN:
            right = self._operands.pop()
            if self._operands.is_empty():
                # Ran out of operands: fold into the default value and give up
                self._operands.push(self._combine(op, self._default_value, right))
                raise UnbalancedScopeError("close() without a matching open")
            left = self._operands.pop()
            self._operands.push(self._combine(op, left, right))
            if self._operators.is_empty():
                raise UnbalancedScopeError("close() without a matching open")
            op = self._operators.pop()

    def binop(self, op: Operation) -> None:
        """
        Start an operation on the current value and wait for its right operand.

        Pending operations of the same or higher precedence are computed first.

        Pre: not "Waiting". Post: "Waiting".

        :param Operation op: Binary operation, not a parenthesis

        :raises InvalidStateError: If a value was expected
        :raises InvalidOperatorError: If op is not a binary operation
        :raises DivisionByZeroError: If a reduction divides by zero; the calculator is cleared
        """
        self._require_not(CalculatorState.WAITING, "binop")
        if not isinstance(op, Operation) or not op.is_binary:
            raise InvalidOperatorError(f"Not a binary operation: {op!r}")

        while (
            self._operators
            and self._operands
            and op.precedence <= self._operators.peek().precedence
        ):
            self._step()

        self._operators.push(op)
        self._state = CalculatorState.WAITING

    def sqrt(self) -> None:
        """
        Replace the current value with its unsigned integer square root.

        Pre: not "Waiting". Post: "Ready".

        :raises InvalidStateError: If a value was expected
        """
        self._require_not(CalculatorState.WAITING, "sqrt")

        if self._operands.is_empty():
            self._operands.push(isqrt(self._default_value))
        else:
            self._operands.push(isqrt(self._operands.pop()))
        self._state = CalculatorState.READY

    def get_current(self) -> int:
        """
        Return the current value: the last entered or computed value.

        :return: Top pending operand, or the default value if none
        :rtype: int
        """
        if self._operands.is_empty():
            return self._default_value
        return self._operands.peek()

    def compute(self) -> int:
        """
        Perform all pending calculations, closing any unclosed opens.

        The result becomes the new default value.

        Pre: not "Waiting". Post: "Clear" (nothing pending).

        :return: Result of the computation
        :rtype: int
        :raises InvalidStateError: If a value was expected
        :raises DivisionByZeroError: If a reduction divides by zero; the calculator is cleared
        """
        self._require_not(CalculatorState.WAITING, "compute")

        while self._operators and self._operands:
            right = self._operands.pop()
            if self._operands.is_empty():
                # Whatever is left below takes the default value as left operand
                result = right
                while self._operators:
                    op = self._operators.pop()
                    if op is not Operation.LPAREN:
                        result = self._combine(op, self._default_value, result)
                self._operands.push(result)
                break
            op = self._operators.pop()
            if op is Operation.LPAREN:
                self._operands.push(right)
                continue
            left = self._operands.pop()
            self._operands.push(self._combine(op, left, right))

        if self._operands:
            self._default_value = self._operands.pop()
        self._operands.clear()
        self._operators.clear()
        self._state = CalculatorState.CLEAR
        return self._default_value

    def clear(self) -> None:
        """
        Clear the calculator, resetting the default value to zero.

        Post: "Clear".
        """
        self._operands.clear()
        self._operators.clear()
        self._default_value = 0
        self._state = CalculatorState.CLEAR

    def _step(self) -> None:
        """Reduce the top operator with one or two pending operands."""
        right = self._operands.pop()
        if self._operands.is_empty():
            op = self._operators.pop()
            if op is Operation.LPAREN:
                # Scope boundary, nothing to reduce
                self._operands.push(right)
            else:
                self._operands.push(self._combine(op, self._default_value, right))
            return

        left = self._operands.pop()
        op = self._operators.pop()
        self._operands.push(self._combine(op, left, right))

    def _combine(self, op: Operation, left: int, right: int) -> int:
        """
        Apply op to left and right, clearing the calculator on a zero divisor.

        :raises DivisionByZeroError: After clearing, if op divides by zero
        """
        if op is Operation.DIVIDE and right == 0:
            self.clear()
            logger.debug("Division by zero, calculator cleared")
            raise DivisionByZeroError(f"division by zero: {left} / 0")
        return op.apply(left, right)

    def __repr__(self) -> str:
        return (
            f"Calculator(state={self._state.value}, current={self.get_current()}, "
            f"operands={len(self._operands)}, operators={len(self._operators)})"
        )
