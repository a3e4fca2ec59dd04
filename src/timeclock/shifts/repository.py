from __future__ import annotations

from typing import Optional, Protocol

from .model import Shift


class ShiftRepository(Protocol):
    def get_by_id(self, *, organization_id: int, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError
