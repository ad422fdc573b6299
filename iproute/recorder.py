"""
Design (recorder.py)
- Purpose: Count route outcomes and persist duplicate routes without blocking workers on disk I/O.
- Inputs: record_success() / record_duplicate(text) / record_error(kind) from dispatcher workers.
- Outputs: counts(), report() summary text; a duplicates log file (only if a duplicate occurred).
- Side effects: Starts one background writer thread; writes the duplicates file from that thread.
- Thread-safety: Counters are guarded by a lock; duplicates go through a bounded queue.Queue
  drained by exactly one consumer. close() is idempotent and may be re-entered.
"""

import logging
import queue
import threading
from pathlib import Path
from typing import Dict, TextIO

from .config import DUPLICATES_FLUSH_THRESHOLD, DUPLICATES_QUEUE_SIZE
from .errors import RecorderClosedError
from .models import COUNTED_KINDS, ERROR_KINDS, OutcomeKind

logger = logging.getLogger(__name__)

_STOP = object()


class DuplicateWriter:
    """
    Design (DuplicateWriter)
    - State:
        path: output file, opened lazily on the first flush
        _queue: bounded queue of records (put() blocks when full, nothing is dropped)
        _buffer: records waiting for the next flush (consumer thread only)
        flushes: number of batches written so far
    - Methods:
        start(): begin the daemon thread
        put(record): hand one record to the consumer
        close(): send the stop sentinel (once) and wait for the final flush
    """

    def __init__(self, path: Path, flush_threshold: int = DUPLICATES_FLUSH_THRESHOLD,
                 queue_size: int = DUPLICATES_QUEUE_SIZE) -> None:
        self.path = Path(path)
        self.flush_threshold = max(1, flush_threshold)
        self.flushes = 0
        self.written = 0
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=queue_size)
        self._buffer: list[str] = []
        self._file: TextIO | None = None
        self._stopping = False
        self._thread = threading.Thread(target=self._loop, name="duplicates-writer", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def put(self, record: str) -> None:
        self._queue.put(record)

    def close(self) -> None:
        if not self._stopping:
            self._queue.put(_STOP)
            self._stopping = True
        self._thread.join()

    def _loop(self) -> None:
        while True:
            record = self._queue.get()
            try:
                if record is _STOP:
                    break
                self._buffer.append(record)
                if len(self._buffer) >= self.flush_threshold:
                    self._flush()
            finally:
                self._queue.task_done()

        self._flush()
        if self._file is not None:
            try:
                self._file.close()
            except OSError as exc:
                logger.error("Error closing duplicates file: %s", exc)
            logger.info("Duplicates written to: %s", self.path)

    def _flush(self) -> None:
        if not self._buffer:
            return
        if self._file is None:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self._file = open(self.path, "w", encoding="utf-8")
            except OSError as exc:
                logger.error("Error creating duplicates file %s: %s", self.path, exc)
                self._buffer.clear()
                return
        try:
            self._file.write("".join(f"{record}\n" for record in self._buffer))
            self._file.flush()
        except OSError as exc:
            logger.error("Error writing duplicates file %s: %s", self.path, exc)
        else:
            self.written += len(self._buffer)
            self.flushes += 1
        self._buffer.clear()


class OutcomeRecorder:
    """
    Design (OutcomeRecorder)
    - State:
        _counts: {OutcomeKind -> int}, one counter per counted kind
        _lock: protects _counts
        _accept_lock: orders record_duplicate() against close() so no record lands after the sentinel
        _writer: background DuplicateWriter
    """

    def __init__(self, duplicates_path: Path, flush_threshold: int = DUPLICATES_FLUSH_THRESHOLD,
                 queue_size: int = DUPLICATES_QUEUE_SIZE) -> None:
        self._lock = threading.Lock()
        self._counts: Dict[OutcomeKind, int] = {kind: 0 for kind in COUNTED_KINDS}
        self._accept_lock = threading.RLock()
        self._closed = False
        self._writer = DuplicateWriter(duplicates_path, flush_threshold, queue_size)
        self._writer.start()

    @property
    def duplicates_path(self) -> Path:
        return self._writer.path

    @property
    def closed(self) -> bool:
        return self._closed

    # -------- Recording --------

    def _increment(self, kind: OutcomeKind) -> None:
        if self._closed:
            raise RecorderClosedError(f"recorder is closed; dropped {kind.name}")
        with self._lock:
            self._counts[kind] += 1

    def record_success(self) -> None:
        self._increment(OutcomeKind.SUCCESS)

    def record_duplicate(self, record: str) -> None:
        """
        Purpose: Count an ALREADY_EXISTS outcome and queue its description for the duplicates file.
        Inputs: record (e.g. "10.0.0.0/24 via 192.168.1.1 dev tun0")
        Side effects: May block while the queue is full.
        """
        with self._accept_lock:
            self._increment(OutcomeKind.ALREADY_EXISTS)
            self._writer.put(record)

    def record_error(self, kind: OutcomeKind) -> None:
        if kind not in ERROR_KINDS:
            raise ValueError(f"{kind.name} is not an error outcome")
        self._increment(kind)

    # -------- Reading --------

    def count(self, kind: OutcomeKind) -> int:
        with self._lock:
            return self._counts.get(kind, 0)

    def counts(self) -> Dict[OutcomeKind, int]:
        with self._lock:
            return dict(self._counts)

    @property
    def total(self) -> int:
        return sum(self.counts().values())

    def report(self) -> str:
        """
        Purpose: Render the statistics block.
        Outputs: Multi-line text. Success and already-exists are always shown, error kinds only
                 when nonzero, followed by the total of all counters.
        """
        counts = self.counts()
        lines = ["", "========== Statistics =========="]
        lines.append(f"{OutcomeKind.SUCCESS.label}: {counts[OutcomeKind.SUCCESS]}")
        lines.append(f"{OutcomeKind.ALREADY_EXISTS.label}: {counts[OutcomeKind.ALREADY_EXISTS]}")
        for kind in ERROR_KINDS:
            if counts[kind] > 0:
                lines.append(f"{kind.label}: {counts[kind]}")
        lines.append(f"Total processed: {sum(counts.values())}")
        lines.append("================================")
        return "\n".join(lines)

    # -------- Shutdown --------

    def close(self) -> None:
        """
        Purpose: Stop accepting records, flush what is buffered, close the file and wait for the
                 writer thread to exit. Calling it again after an interrupted close waits
                 for the same writer; the sentinel is only sent once.
        """
        with self._accept_lock:
            self._closed = True
            self._writer.close()
