from typing import Dict, ItemsView, Mapping, Optional


class CorrectionTable:
    """
    Learned expense-name -> category overrides.

    Keys are matched exactly (case-sensitive, no trimming, no fuzzy matching).
    Writes are last-write-wins. Entries only go away through `clear()`.

    Example:
        ```
        table = CorrectionTable()
        table.record("Starbucks", "Café")
        table.lookup("Starbucks")   # 'Café'
        table.lookup("starbucks")   # None
        ```
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries: Dict[str, str] = dict(entries or {})

    def lookup(self, name: str) -> Optional[str]:
        """Return the learned category for `name`, or None if there is none"""
        return self._entries.get(name)

    def record(self, name: str, category: str) -> None:
        """Upsert the category for `name`, overwriting any prior entry"""
        self._entries[name] = category

    def clear(self) -> None:
        """Forget every learned correction"""
        self._entries.clear()

    def items(self) -> ItemsView[str, str]:
        return self._entries.items()

    def to_dict(self) -> Dict[str, str]:
        return dict(self._entries)

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> "CorrectionTable":
        return cls(data)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"CorrectionTable({len(self._entries)} entries)"
