"""Exceptions raised by the calculator and its collaborators."""


class CalculatorError(Exception):
    """Base class of every calculator fault."""


class InvalidStateError(CalculatorError, RuntimeError):
    """A command was issued in a state that does not allow it. Nothing was changed."""


class InvalidOperatorError(CalculatorError, ValueError):
    """An operator that is not a binary operation was used as one."""


class InvalidValueError(CalculatorError, ValueError):
    """A value is not a signed 64-bit integer."""


class EmptyScopeError(CalculatorError, LookupError):
    """A scope was closed while nothing was pending."""


class UnbalancedScopeError(EmptyScopeError):
    """A scope was closed without a matching open. The dangling work was folded first."""


class DivisionByZeroError(CalculatorError, ZeroDivisionError):
    """A reduction divided by zero. The calculator was cleared before this was raised."""


class StackUnderflowError(CalculatorError, IndexError):
    """Pop or peek on an empty stack."""
