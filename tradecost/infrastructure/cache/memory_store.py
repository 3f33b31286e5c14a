import threading
from typing import Dict, Optional

from tradecost.core.entities.valuation import FrozenClose
from tradecost.core.interfaces.freeze_store import IFreezeStore


class InMemoryFreezeStore(IFreezeStore):
    """Process-local snapshots, used when Redis is not configured."""

    def __init__(self):
        self._snapshots: Dict[str, FrozenClose] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[FrozenClose]:
        return self._snapshots.get(key)

    def put_if_absent(self, key: str, value: FrozenClose) -> FrozenClose:
        with self._lock:
            return self._snapshots.setdefault(key, value)

    def __len__(self) -> int:
        return len(self._snapshots)
