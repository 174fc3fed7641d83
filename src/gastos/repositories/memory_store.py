from typing import Dict, Optional

from gastos.repositories.base import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dict-backed store. Nothing survives the process; used for tests and dry runs."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, value: str) -> None:
        self.data[key] = value
