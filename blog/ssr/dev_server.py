# ----------------------
# file   : blog/ssr/dev_server.py
# function: development mode - watch the bundle and shell files, rebuild the renderer on change
# ----------------------

import asyncio
import os
from typing import Awaitable, Callable, Optional, Tuple

from loguru import logger

from blog.ssr.renderer import load_bundle

OnUpdate = Callable[[dict, str], Awaitable[None]]


class DevBundleWatcher:
    def __init__(self, bundle_path: str, template_path: str, on_update: OnUpdate, interval: float = 1.0):
        self.bundle_path = bundle_path
        self.template_path = template_path
        self.on_update = on_update
        self.interval = interval
        self._last: Optional[Tuple[float, float]] = None
        self._task: Optional[asyncio.Task] = None

    def _mtimes(self) -> Optional[Tuple[float, float]]:
        try:
            return os.path.getmtime(self.bundle_path), os.path.getmtime(self.template_path)
        except OSError:
            return None

    # ----------------------
    # function: reload when either file changed since the last look
    # return  : True when a new pair was handed to on_update
    # ----------------------
    async def check(self) -> bool:
        mtimes = self._mtimes()
        if mtimes is None or mtimes == self._last:
            return False
        # remember even a broken build, retry on the next change
        self._last = mtimes
        try:
            bundle = load_bundle(self.bundle_path)
            with open(self.template_path, "r", encoding="utf-8") as f:
                template = f.read()
            await self.on_update(bundle, template)
        except Exception:
            logger.exception(f"[DEV] reload failed: {self.bundle_path}")
            return False
        logger.info(f"[DEV] bundle reloaded: {self.bundle_path}")
        return True

    async def run(self) -> None:
        while True:
            try:
                await self.check()
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self.run())
            logger.info(f"[DEV] watching {self.bundle_path} and {self.template_path}")
        return self._task

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
