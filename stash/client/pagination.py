from __future__ import annotations

import threading

DEFAULT_PAGE_SIZE = 20
DEFAULT_REVEAL_STEP = 10


class RevealController:
    """Growing visible prefix over the filtered sequence."""

    def __init__(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        step: int = DEFAULT_REVEAL_STEP,
    ):
        self.page_size = page_size
        self.step = step
        self.visible_count = 0
        self._revealing = threading.Lock()

    def reset(self, length: int, searching: bool = False) -> int:
        # search results are shown whole, never paginated
        if searching:
            self.visible_count = length
        else:
            self.visible_count = min(self.page_size, length)
        return self.visible_count

    def can_reveal(self, length: int, searching: bool = False) -> bool:
        return not searching and self.visible_count < length

    def reveal_more(self, length: int, searching: bool = False) -> bool:
        if not self.can_reveal(length, searching):
            return False
        if not self._revealing.acquire(blocking=False):
            return False
        try:
            self.visible_count = min(self.visible_count + self.step, length)
        finally:
            self._revealing.release()
        return True

    def visible(self, records) -> list:
        return list(records[: self.visible_count])
