"""
Scheduler for a dynamically growing set of asyncio tasks.

Tasks may schedule more tasks while they run; drain() only returns once the
whole set, including work added along the way, has finished.
"""
import asyncio
from collections import deque


class Scheduler:
    """
    Work queue plus in-flight set with an optional concurrency cap.

    Must be created and used from inside a running event loop.

    Args:
        concurrency: Maximum tasks in flight, or None for no limit
    """

    def __init__(self, concurrency=None):
        if concurrency is not None and concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.concurrency = concurrency
        self._pending = deque()
        self._running = set()
        self._error = None
        self._settled = asyncio.Event()

    @property
    def idle(self) -> bool:
        return not self._pending and not self._running

    @property
    def failed(self) -> bool:
        return self._error is not None

    def schedule(self, task):
        """
        Enqueue task, a zero-argument callable returning an awaitable.

        Safe to call from a running task. Ignored once a task has failed.
        """
        if self._error is not None:
            return
        self._pending.append(task)
        self._pump()

    def _pump(self):
        loop = asyncio.get_running_loop()
        while self._pending and (self.concurrency is None or len(self._running) < self.concurrency):
            task = self._pending.popleft()
            runner = loop.create_task(self._run(task))
            self._running.add(runner)
            # done callbacks also fire for runners cancelled before they start
            runner.add_done_callback(self._finished)

    async def _run(self, task):
        try:
            await task()
        except Exception as e:
            self._fail(e)

    def _finished(self, runner):
        self._running.discard(runner)
        if self._error is None:
            self._pump()
        self._settled.set()

    def _fail(self, error):
        if self._error is not None:
            return
        self._error = error
        # Fail fast: queued work is dropped and in-flight siblings stop
        self._pending.clear()
        current = asyncio.current_task()
        for runner in self._running:
            if runner is not current:
                runner.cancel()

    async def drain(self):
        """
        Wait until no task is pending or running.

        Quiescence is re-checked after every completion, since a finishing
        task may have scheduled more work.

        Raises:
            Exception: The first failure raised by any task
        """
        while not self.idle:
            self._settled.clear()
            await self._settled.wait()
        if self._error is not None:
            raise self._error
