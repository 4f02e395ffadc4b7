"""In-memory store of generated pages with background revalidation bookkeeping."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Set

__all__ = ["CachedPage", "PageCache"]


@dataclass(frozen=True)
class CachedPage:
    html: str
    status_code: int
    generated_at: float
    revalidate: int | None = None


class PageCache:
    """Thread-safe map of route path to generated page.

    ``revalidate=None`` marks a page as built once and never stale. At most one
    generation per path runs at a time: callers claim a path with
    :meth:`begin_generation` and release it with :meth:`end_generation`.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._pages: Dict[str, CachedPage] = {}
        self._generating: Set[str] = set()

    def get(self, path: str) -> CachedPage | None:
        with self._lock:
            return self._pages.get(path)

    def put(self, path: str, html: str, *, status_code: int = 200, revalidate: int | None = None) -> CachedPage:
        page = CachedPage(html=html, status_code=status_code, generated_at=self._clock(), revalidate=revalidate)
        with self._lock:
            self._pages[path] = page
        return page

    def is_stale(self, page: CachedPage) -> bool:
        if page.revalidate is None:
            return False
        return self._clock() - page.generated_at >= page.revalidate

    def begin_generation(self, path: str) -> bool:
        """Claim ``path`` for generation; ``False`` when another one is running."""

        with self._lock:
            if path in self._generating:
                return False
            self._generating.add(path)
            return True

    def end_generation(self, path: str) -> None:
        with self._lock:
            self._generating.discard(path)

    def paths(self) -> list[str]:
        with self._lock:
            return sorted(self._pages)
