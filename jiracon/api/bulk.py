"""Bulk orchestrator — concurrent fan-out of independent gateway calls.

A batch is either a list of BulkRequest or a mapping key → BulkRequest.
Results come back in the same shape: list positions and mapping keys are
preserved whatever order the calls complete in.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Mapping, Optional, Sequence, Union

from rich.console import Console

from jiracon.types import BulkOutcome, BulkRequest

logger = logging.getLogger(__name__)

Batch = Union[Sequence[Union[BulkRequest, dict]], Mapping[Any, Union[BulkRequest, dict]]]


def _coerce(request: Union[BulkRequest, dict]) -> BulkRequest:
    if isinstance(request, BulkRequest):
        return request
    return BulkRequest.model_validate(request)


def _split(requests: Batch) -> tuple[Optional[list], list[BulkRequest]]:
    """Return (keys or None for list input, requests in input order)."""
    if isinstance(requests, Mapping):
        keys = list(requests.keys())
        return keys, [_coerce(requests[k]) for k in keys]
    return None, [_coerce(r) for r in requests]


def _reshape(keys: Optional[list], values: list) -> Union[list, dict]:
    if keys is None:
        return values
    return dict(zip(keys, values))


class BulkOrchestrator:
    """Dispatches batches through a RequestGateway.

    Args:
        gateway: RequestGateway (or anything with the same ``call`` signature)
        console: rich Console for the batch spinner
    """

    def __init__(self, gateway, console: Optional[Console] = None):
        self._gateway = gateway
        self._console = console or Console(stderr=True)

    def _spinner(self, show: bool, count: int):
        if not show:
            return contextlib.nullcontext()
        return self._console.status(f"[yellow]loading[/yellow] [dim]({count} requests)[/dim]")

    def _dispatch(self, request: BulkRequest):
        # Per-call spinners are suppressed; the batch shows a single one
        return self._gateway.call(
            request.method.value, request.path, dict(request.params), show_spinner=False,
        )

    async def execute(self, requests: Batch, show_spinner: bool = True) -> Union[list, dict]:
        """Run every request concurrently; fail fast.

        Raises:
            The first failure. Outstanding calls are cancelled and no partial
            results are returned.
        """
        keys, items = _split(requests)
        if not items:
            return _reshape(keys, [])

        tasks = [asyncio.ensure_future(self._dispatch(item)) for item in items]
        with self._spinner(show_spinner, len(tasks)):
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                # Let cancelled calls unwind before propagating
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        logger.debug("Bulk of %d request(s) completed", len(items))
        return _reshape(keys, list(results))

    async def execute_settled(self, requests: Batch, show_spinner: bool = True) -> Union[list, dict]:
        """Run every request concurrently to completion, failures included.

        Returns:
            BulkOutcome per request, in the input's shape.
        """
        keys, items = _split(requests)
        with self._spinner(show_spinner, len(items)):
            raw = await asyncio.gather(
                *(self._dispatch(item) for item in items), return_exceptions=True,
            )

        outcomes = []
        for item, value in zip(items, raw):
            if isinstance(value, BaseException):
                if not isinstance(value, Exception):
                    raise value
                logger.warning("%s %s failed: %s", item.method.value, item.path, value)
                outcomes.append(BulkOutcome(ok=False, error=value))
            else:
                outcomes.append(BulkOutcome(ok=True, result=value))
        return _reshape(keys, outcomes)
