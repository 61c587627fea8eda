"""
State store interface definitions
"""

from abc import ABC, abstractmethod
from typing import Dict, List


class StateStoreInterface(ABC):
    """Interface for agent-side state: usage counters, favorites and checklist progress"""

    @abstractmethod
    def increment(self, namespace: str, key: str, amount: int = 1) -> int:
        """Increment a counter and return its new value"""
        pass

    @abstractmethod
    def counters(self, namespace: str) -> Dict[str, int]:
        """Snapshot of all counters in a namespace"""
        pass

    @abstractmethod
    def toggle_member(self, namespace: str, key: str) -> bool:
        """Add the key to the set if absent, remove it otherwise; returns membership after the toggle"""
        pass

    @abstractmethod
    def members(self, namespace: str) -> List[str]:
        """Members of a set in insertion order"""
        pass

    @abstractmethod
    def set_item_state(self, namespace: str, key: str, index: int, completed: bool) -> None:
        """Mark one item of a keyed checklist as completed or pending"""
        pass

    @abstractmethod
    def item_states(self, namespace: str, key: str) -> Dict[int, bool]:
        """Item index -> completed for a keyed checklist"""
        pass
