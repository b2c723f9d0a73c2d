"""Per-block render operations with cooperative cancellation.

Starting a render for a block cancels whatever was still running for that
block, so a block never has two live operations. Nothing is preempted: the
running coroutine notices the cancelled token at its next check.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class RenderCancelled(Exception):
    """Raised by engines that stop early on a cancelled token."""


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RenderCancelled("Render operation aborted")


@dataclass
class RenderOperation:
    block_id: str
    token: CancellationToken = field(default_factory=CancellationToken)
    start_time: float = field(default_factory=time.monotonic)


class RenderOperationManager:
    def __init__(self) -> None:
        self._operations: Dict[str, RenderOperation] = {}

    def start(self, block_id: str) -> CancellationToken:
        # synchronous: the previous token is cancelled before the caller can suspend
        self.cancel(block_id)
        operation = RenderOperation(block_id=block_id)
        self._operations[block_id] = operation
        return operation.token

    def cancel(self, block_id: str) -> None:
        operation = self._operations.pop(block_id, None)
        if operation is not None:
            operation.token.cancel()
            logger.debug("Cancelled render operation", extra={"block_id": block_id})

    def cancel_all(self) -> None:
        for operation in self._operations.values():
            operation.token.cancel()
        if self._operations:
            logger.debug("Cancelled %d render operations", len(self._operations))
        self._operations.clear()

    def complete(self, block_id: str, token: Optional[CancellationToken] = None) -> None:
        """Stop tracking a finished operation.

        With ``token``, only the operation owning that token is removed, so a
        superseded render finishing late leaves its successor registered.
        """
        operation = self._operations.get(block_id)
        if operation is None:
            return
        if token is not None and operation.token is not token:
            return
        del self._operations[block_id]

    def pending_count(self) -> int:
        return len(self._operations)

    def is_pending(self, block_id: str) -> bool:
        return block_id in self._operations
