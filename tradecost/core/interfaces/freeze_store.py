from abc import ABC, abstractmethod
from typing import Optional

from tradecost.core.entities.valuation import FrozenClose


class IFreezeStore(ABC):
    """
    Write-once store for closed-leg values.
    The first value written for a key wins; later writes return that value.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[FrozenClose]:
        pass

    @abstractmethod
    def put_if_absent(self, key: str, value: FrozenClose) -> FrozenClose:
        """
        Stores value unless the key already exists.
        Returns whichever value is stored for the key after the call:
        `value` itself when this call stored it, the earlier value otherwise.
        """
        pass
