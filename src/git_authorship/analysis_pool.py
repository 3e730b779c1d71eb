from __future__ import annotations

import sys
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Callable, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_CONCURRENCY = 50


def run_pool(
    items: Sequence[T],
    concurrency: int,
    worker: Callable[[T], R],
    on_progress: Optional[Callable[[int, int], None]] = None,
) -> list[R]:
    """
    Run `worker` over `items` with at most `concurrency` calls in flight.

    Results come back in input order. A worker that raises is reported on stderr
    and its item is left out of the results; siblings keep running. `on_progress`
    is called as (done, total) on this thread once per item, whether it succeeded
    or failed.
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be >= 1, got {concurrency}")

    total = len(items)
    if total == 0:
        return []

    slots: list[tuple[bool, R | None]] = [(False, None)] * total
    with ThreadPoolExecutor(max_workers=min(concurrency, total)) as ex:
        futs: dict[Future[R], int] = {ex.submit(worker, item): i for i, item in enumerate(items)}
        for done, fut in enumerate(as_completed(futs), start=1):
            i = futs[fut]
            try:
                slots[i] = (True, fut.result())
            except Exception as e:
                print(f"Error processing {items[i]!s}: {e}", file=sys.stderr)
            if on_progress is not None:
                on_progress(done, total)

    return [r for ok, r in slots if ok]  # type: ignore[misc]
