# ----------------------
# file   : blog/ssr/holder.py
# function: current (renderer, template) pair - uninitialized until the first swap
# ----------------------

import asyncio
from typing import NamedTuple, Optional

from blog.ssr.html_stream import ShellTemplate
from blog.ssr.renderer import BundleRenderer


class RenderPair(NamedTuple):
    renderer: BundleRenderer
    template: ShellTemplate


class RenderContextHolder:
    """
    Readers take ``current`` once per request and use that pair to the end.
    Writers replace the whole pair under a lock, so a reader never sees a
    renderer from one build with the template of another.
    """

    def __init__(self):
        self._current: Optional[RenderPair] = None
        self._lock = asyncio.Lock()
        self.version = 0

    @property
    def current(self) -> Optional[RenderPair]:
        return self._current

    @property
    def ready(self) -> bool:
        return self._current is not None

    def set(self, renderer: BundleRenderer, template: ShellTemplate) -> None:
        self._current = RenderPair(renderer, template)
        self.version += 1

    async def swap(self, renderer: BundleRenderer, template: ShellTemplate) -> None:
        async with self._lock:
            self.set(renderer, template)
