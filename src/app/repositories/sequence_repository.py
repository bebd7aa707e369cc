from abc import ABC, abstractmethod


class ISequenceRepository(ABC):
    """Atomic named counters - application layer"""

    @abstractmethod
    async def next_value(self, name: str) -> int:
        """
        Allocate the next value of a sequence inside the current transaction.

        Two concurrent transactions never receive the same value.
        """
        pass
