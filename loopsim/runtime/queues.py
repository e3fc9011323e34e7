"""Queue set owned by one scheduler instance."""

from __future__ import annotations

from collections import deque
from heapq import heapify, heappop, heappush

from loopsim.runtime.errors import QueueEmpty
from loopsim.runtime.tasks import Task


class QueueSet:
    """Call stack, microtask queue, timer heap and Node-style phase queues.

    Timer/macrotask entries are ordered by ``(ready_at, enqueued_at, task_id)``.
    Every other queue is FIFO in insertion order. Pops remove the task before
    the caller runs it, so registrations made by the running action never
    disturb the queue it came from.
    """

    def __init__(self) -> None:
        self._call_stack: list[Task] = []
        self._microtasks: deque[Task] = deque()
        self._macrotask_heap: list[tuple[int, int, int]] = []
        self._macrotasks: dict[int, Task] = {}
        self._immediates: deque[Task] = deque()
        self._poll: deque[Task] = deque()
        self._close: deque[Task] = deque()

    @property
    def stack_depth(self) -> int:
        return len(self._call_stack)

    @property
    def microtask_count(self) -> int:
        return len(self._microtasks)

    @property
    def macrotask_count(self) -> int:
        return len(self._macrotasks)

    @property
    def immediate_count(self) -> int:
        return len(self._immediates)

    @property
    def poll_count(self) -> int:
        return len(self._poll)

    @property
    def close_count(self) -> int:
        return len(self._close)

    @property
    def total_count(self) -> int:
        return (
            self.stack_depth
            + self.microtask_count
            + self.macrotask_count
            + self.immediate_count
            + self.poll_count
            + self.close_count
        )

    def is_empty(self) -> bool:
        return self.total_count == 0

    def push_frame(self, task: Task) -> None:
        self._call_stack.append(task)

    def pop_frame(self) -> Task:
        if not self._call_stack:
            raise QueueEmpty("call stack is empty")
        return self._call_stack.pop()

    def push_microtask(self, task: Task) -> None:
        self._microtasks.append(task)

    def push_macrotask(self, task: Task, ready_at: int) -> None:
        """Insert keeping ``(ready_at, enqueued_at, task_id)`` order."""
        if ready_at != task.ready_at:
            raise ValueError("ready_at must match task.ready_at")
        self._macrotasks[task.task_id] = task
        heappush(self._macrotask_heap, task.sort_key)

    def push_immediate(self, task: Task) -> None:
        self._immediates.append(task)

    def push_poll(self, task: Task) -> None:
        self._poll.append(task)

    def push_close(self, task: Task) -> None:
        self._close.append(task)

    def pop_next_microtask(self) -> Task:
        if not self._microtasks:
            raise QueueEmpty("no microtasks")
        return self._microtasks.popleft()

    def peek_due_macrotask(self, as_of: int) -> Task | None:
        if not self._macrotask_heap:
            return None
        ready_at, _, task_id = self._macrotask_heap[0]
        if ready_at > as_of:
            return None
        return self._macrotasks[task_id]

    def pop_due_macrotask(self, as_of: int) -> Task:
        """Pop the head iff it is due at `as_of`; otherwise raise QueueEmpty."""
        if self.peek_due_macrotask(as_of) is None:
            raise QueueEmpty(f"no macrotask due at {as_of}")
        _, _, task_id = heappop(self._macrotask_heap)
        return self._macrotasks.pop(task_id)

    def peek_next_immediate(self) -> Task | None:
        return self._immediates[0] if self._immediates else None

    def pop_next_immediate(self) -> Task:
        if not self._immediates:
            raise QueueEmpty("no immediates")
        return self._immediates.popleft()

    def peek_next_poll(self) -> Task | None:
        return self._poll[0] if self._poll else None

    def pop_next_poll(self) -> Task:
        if not self._poll:
            raise QueueEmpty("no poll completions")
        return self._poll.popleft()

    def peek_next_close(self) -> Task | None:
        return self._close[0] if self._close else None

    def pop_next_close(self) -> Task:
        if not self._close:
            raise QueueEmpty("no close callbacks")
        return self._close.popleft()

    def next_timer_at(self) -> int | None:
        """Return the earliest pending macrotask ready time, if any."""
        if not self._macrotask_heap:
            return None
        return self._macrotask_heap[0][0]

    def remove(self, task_id: int) -> Task | None:
        """Remove a queued task by id from whichever queue holds it."""
        task = self._macrotasks.pop(task_id, None)
        if task is not None:
            self._macrotask_heap = [entry for entry in self._macrotask_heap if entry[2] != task_id]
            heapify(self._macrotask_heap)
            return task
        for container in (self._microtasks, self._immediates, self._poll, self._close):
            for queued in container:
                if queued.task_id == task_id:
                    container.remove(queued)
                    return queued
        for index, frame in enumerate(self._call_stack):
            if frame.task_id == task_id:
                del self._call_stack[index]
                return frame
        return None

    def clear(self) -> None:
        self._call_stack.clear()
        self._microtasks.clear()
        self._macrotask_heap.clear()
        self._macrotasks.clear()
        self._immediates.clear()
        self._poll.clear()
        self._close.clear()
