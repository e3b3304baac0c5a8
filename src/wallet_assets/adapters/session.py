"""Login session gate backed by an ``asyncio.Event``."""

import asyncio
import logging

logger = logging.getLogger(__name__)


class StaticSession:
    """Session for a known wallet address.

    Network-dependent calls wait in ``wait_for_login`` until ``login`` is called.
    Pass ``logged_in=True`` for non-interactive use such as the CLI.
    """

    def __init__(self, address: str, *, logged_in: bool = False):
        self._address = address
        self._ready = asyncio.Event()
        if logged_in:
            self._ready.set()

    @property
    def address(self) -> str:
        return self._address

    @property
    def is_logged_in(self) -> bool:
        return self._ready.is_set()

    def login(self) -> None:
        logger.info(f"Session opened for {self._address}")
        self._ready.set()

    def logout(self) -> None:
        logger.info(f"Session closed for {self._address}")
        self._ready.clear()

    async def wait_for_login(self) -> None:
        await self._ready.wait()
