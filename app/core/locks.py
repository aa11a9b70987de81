"""
Per-product mutual exclusion for stock writes.

Order placement, stock adjustment and stock settings updates hold the lock of
every product they touch for the whole unit of work (until commit/rollback).
Locks are always acquired in sorted product-id order so that two orders
touching overlapping product sets cannot deadlock.

This serializes writers inside one process. Across processes the conditional
UPDATE in InventoryService.check_and_reserve and the quantity CHECK
constraint keep stock from going negative.
"""
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncIterator, Iterable
import asyncio
import uuid
import weakref


class ProductLockRegistry:
    """Hands out one asyncio.Lock per product id."""

    def __init__(self):
        # Weak values: a lock lives only while some coroutine holds or waits on it
        self._locks: "weakref.WeakValueDictionary[uuid.UUID, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, product_id: uuid.UUID) -> asyncio.Lock:
        lock = self._locks.get(product_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[product_id] = lock
        return lock

    def is_locked(self, product_id: uuid.UUID) -> bool:
        lock = self._locks.get(product_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def hold(self, product_ids: Iterable[uuid.UUID]) -> AsyncIterator[None]:
        """Acquire the locks of all given products, in stable order."""
        ordered = sorted(set(product_ids))
        locks = [self._lock_for(product_id) for product_id in ordered]

        async with AsyncExitStack() as stack:
            for lock in locks:
                await stack.enter_async_context(lock)
            yield


# Shared by every service instance in this process
product_locks = ProductLockRegistry()
