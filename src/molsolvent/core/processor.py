"""
Concurrent frame processing over a single forward-only trajectory stream.
"""
import concurrent.futures
import threading
import logging
from typing import Callable, Generic, List, Optional, TypeVar

from tqdm import tqdm

from .frame import Frame
from ..io.loader import TrajectoryReader
from ..utils.helpers import default_worker_count

logger = logging.getLogger(__name__)

S = TypeVar('S')


class ProcessorContext:
    """
    State shared by the workers of one run: the last claimed frame index, the
    first error and the lock serializing stream access.
    """

    def __init__(self, start: int, end: int, stride: int = 1):
        if stride < 1:
            raise ValueError("stride must be at least 1.")
        self.current = start  # frame `start` is handled by the caller before the workers start
        self.end = end
        self.stride = stride
        self.error: Optional[BaseException] = None
        self.lock = threading.RLock()
        self.processed = 0

    def claim(self) -> Optional[int]:
        """Next frame index to read, or None when the run is over. Call with the lock held."""
        if self.error is not None:
            return None
        nxt = self.current + self.stride
        if nxt >= self.end:
            return None
        self.current = nxt
        return nxt

    def fail(self, exc: BaseException) -> None:
        with self.lock:
            if self.error is None:
                self.error = exc
                logger.debug(f"First error recorded: {exc}")
            else:
                logger.debug(f"Discarding later error: {exc}")

    @property
    def total(self) -> int:
        """Frames the workers are expected to claim."""
        return len(range(self.current + self.stride, self.end, self.stride))


class ConcurrentFrameProcessor(Generic[S]):
    """
    Run a per-frame computation on several threads while reading the stream
    on one thread at a time.

    Each worker repeatedly takes the lock, claims the next frame index, reads
    that frame, releases the lock and computes on its own state object. Frames
    therefore leave the stream in increasing order, exactly once. The first
    error stops further claims; frames already being computed still finish and
    the error is raised once every worker has returned.

    Args:
        reader: Reader whose first frame has already been read
        end: Exclusive end of the frame range
        workers: Number of workers including the calling thread
        stride: Distance between two processed frames (1 + frames skipped)
        progress: Show a progress bar
        desc: Progress bar label
    """

    def __init__(self, reader: TrajectoryReader, end: int, workers: Optional[int] = None,
                 stride: int = 1, progress: bool = True, desc: str = "Processing frames"):
        self.reader = reader
        self.end = end
        self.workers = workers if workers is not None else default_worker_count()
        if self.workers < 1:
            raise ValueError("At least one worker is required.")
        self.stride = stride
        self.progress = progress
        self.desc = desc

    def run(self, work: Callable[[S, Frame], None], init_state: Callable[[], S] = lambda: None) -> List[S]:
        """
        Process every remaining frame of the range.

        Args:
            work: Called as ``work(state, frame)`` outside the lock
            init_state: Builds one private state per worker

        Returns:
            The worker states, for the caller to merge

        Raises:
            The first error recorded by any worker
        """
        ctx = ProcessorContext(self.reader.index - 1, self.end, self.stride)
        states = [init_state() for _ in range(self.workers)]
        logger.info(f"{self.desc}: {ctx.total} frames on {self.workers} worker(s)")

        with tqdm(total=ctx.total, desc=self.desc, unit="fr", disable=not self.progress) as bar:
            if self.workers == 1:
                self._worker(ctx, work, states[0], bar)
            else:
                with concurrent.futures.ThreadPoolExecutor(max_workers=self.workers - 1,
                                                           thread_name_prefix="molsolvent") as executor:
                    futures = [executor.submit(self._worker, ctx, work, state, bar) for state in states[1:]]
                    self._worker(ctx, work, states[0], bar)
                    for future in futures:
                        future.result()

        if ctx.error is not None:
            logger.error(f"{self.desc} stopped after {ctx.processed} frames: {ctx.error}")
            raise ctx.error
        logger.info(f"{self.desc}: {ctx.processed} frames processed")
        return states

    def _worker(self, ctx: ProcessorContext, work: Callable[[S, Frame], None], state: S, bar: tqdm) -> None:
        while True:
            with ctx.lock:
                index = ctx.claim()
                if index is None:
                    return
                try:
                    self.reader.skip(index - self.reader.index)
                    frame = self.reader.read_next()
                except Exception as exc:
                    ctx.fail(exc)
                    return

            try:
                work(state, frame)
            except Exception as exc:
                ctx.fail(exc)
                return

            with ctx.lock:
                ctx.processed += 1
                bar.update(1)
