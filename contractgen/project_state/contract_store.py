from __future__ import annotations

import threading
from typing import Iterator, List, Optional

from contractgen.project_state.models import GeneratedContract


class ContractStore:
    """
    In-memory, newest-first list of generated contracts.

    Lives for the process lifetime only. Reads return snapshots; writes are
    expected to come from a single owner (the Orchestrator).
    """

    def __init__(self) -> None:
        self._items: List[GeneratedContract] = []
        self._lock = threading.RLock()

    def insert_front(self, contract: GeneratedContract) -> None:
        with self._lock:
            if self._index_of(contract.id) is not None:
                raise ValueError(f"Contract {contract.id} is already stored")
            self._items.insert(0, contract)

    def find_by_id(self, contract_id: str) -> Optional[GeneratedContract]:
        with self._lock:
            idx = self._index_of(contract_id)
            return self._items[idx] if idx is not None else None

    def replace_at(self, contract_id: str, new_contract: GeneratedContract) -> None:
        with self._lock:
            idx = self._index_of(contract_id)
            if idx is None:
                raise KeyError(contract_id)

            current = self._items[idx]
            if new_contract.id != current.id or new_contract.created_at != current.created_at:
                raise ValueError("Replacement must keep the contract id and creation time")
            self._items[idx] = new_contract

    def all(self) -> List[GeneratedContract]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[GeneratedContract]:
        return iter(self.all())

    def _index_of(self, contract_id: str) -> Optional[int]:
        for idx, item in enumerate(self._items):
            if item.id == contract_id:
                return idx
        return None
