"""
Trailing Debounce for Form Transliteration

Each keystroke on a transliterated field schedules a call after a short
quiet period. A newer keystroke on the same field cancels the pending
call, so only the last value after a pause reaches the network.

The result is written into the dependent field (``name`` ->
``name_hindi``, ``landmark`` -> ``landmark_hindi``). A failed call
leaves the dependent field as it was.
"""

import asyncio
from typing import Any, Awaitable, Callable, MutableMapping, Optional

from aquaflow.logger import get_logger
from aquaflow.services.transliteration.client import TransliterationClient


log = get_logger(__name__)

# Source field -> field receiving the transliteration
TRANSLITERATED_FIELDS = {
    "name": "name_hindi",
    "landmark": "landmark_hindi",
}


class TrailingDebouncer:
    """Per-key trailing debounce over asyncio tasks."""

    def __init__(self, delay: float = 0.3):
        self.delay = delay
        self._pending: dict[str, asyncio.Task] = {}

    def trigger(self, key: str, action: Callable[[], Awaitable[Any]]) -> asyncio.Task:
        """
        Schedule ``action`` for ``key`` after the quiet period.

        Must be called from a running event loop. Any call still pending
        for the same key is cancelled.
        """
        previous = self._pending.get(key)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.get_running_loop().create_task(self._run(action))
        self._pending[key] = task
        task.add_done_callback(lambda done, k=key: self._forget(k, done))
        return task

    async def _run(self, action: Callable[[], Awaitable[Any]]) -> Any:
        await asyncio.sleep(self.delay)
        return await action()

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]

    def is_pending(self, key: str) -> bool:
        task = self._pending.get(key)
        return task is not None and not task.done()

    async def flush(self) -> None:
        """Wait for every pending call to fire."""
        tasks = list(self._pending.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def cancel_all(self) -> None:
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()


class FormTransliterator:
    """
    Keeps the Devanagari fields of a customer form in step with their
    Latin-script sources.

    ``form`` is any mutable mapping keyed by snake_case field names.
    """

    def __init__(
        self,
        client: TransliterationClient,
        debouncer: Optional[TrailingDebouncer] = None,
        fields: Optional[dict[str, str]] = None,
    ):
        self._client = client
        self._debouncer = debouncer or TrailingDebouncer()
        self._fields = fields or dict(TRANSLITERATED_FIELDS)

    @property
    def debouncer(self) -> TrailingDebouncer:
        return self._debouncer

    def on_change(
        self,
        form: MutableMapping[str, Any],
        field: str,
        value: str,
    ) -> Optional[asyncio.Task]:
        """Record a keystroke and schedule the dependent-field update."""
        form[field] = value
        target = self._fields.get(field)
        if target is None:
            return None
        return self._debouncer.trigger(field, lambda: self._apply(form, target, value))

    async def _apply(self, form: MutableMapping[str, Any], target: str, text: str) -> None:
        result = await self._client.transliterate(text)
        if result is None:
            return
        form[target] = result
        log.debug("transliteration_applied", field=target)

    async def flush(self) -> None:
        await self._debouncer.flush()
