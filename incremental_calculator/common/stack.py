"""Generic LIFO stack used by the calculator."""
from typing import Generic, Iterator, List, TypeVar

from incremental_calculator.common.errors import StackUnderflowError

T = TypeVar("T")


class Stack(Generic[T]):
    """
    Last-in first-out container.

    Backed by a list whose end is the top of the stack.
    """

    def __init__(self) -> None:
        self._items: List[T] = []

    def push(self, item: T) -> None:
        """Put an item on top of the stack."""
        self._items.append(item)

    def pop(self) -> T:
        """
        Remove and return the top item.

        :return: The most recently pushed item
        :raises StackUnderflowError: If the stack is empty
        """
        if not self._items:
            raise StackUnderflowError("pop from empty stack")
        return self._items.pop()

    def peek(self) -> T:
        """
        Return the top item without removing it.

        :return: The most recently pushed item
        :raises StackUnderflowError: If the stack is empty
        """
        if not self._items:
            raise StackUnderflowError("peek at empty stack")
        return self._items[-1]

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[T]:
        # Top first, the order pop() would return items
        return reversed(self._items)

    def __repr__(self) -> str:
        return f"Stack({self._items!r})"
