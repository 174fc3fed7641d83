from abc import ABC, abstractmethod
from typing import Optional


class PersistenceError(Exception):
    """Raised when a value cannot be read from or written to the store."""
    pass


class ExpenseNotFoundError(Exception):
    """Raised when an expense cannot be found."""
    pass


class KeyValueStore(ABC):
    """
    Abstract key-value blob store.

    Values are opaque serialized strings stored under fixed keys. There is
    no versioning; a format change needs readers and writers updated together.
    """

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """
        Read the value stored under `key`.

        Returns:
            The serialized value, or None if the key was never written

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass

    @abstractmethod
    def save(self, key: str, value: str) -> None:
        """
        Write `value` under `key`, replacing any previous value.

        Raises:
            PersistenceError: If the write fails
        """
        pass
