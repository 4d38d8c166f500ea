"""Thread and semaphore exercises: counters, bounded queue, shared sums and buffers."""

from __future__ import annotations

import contextlib
import fcntl
import itertools
import os
import queue as _queue
import random
import struct
import sys
import tempfile
import threading
import time
from collections import deque
from multiprocessing import resource_tracker, shared_memory
from typing import Callable, TextIO

QUEUE_CAPACITY = 8
RANDOM_LIMIT = 64
BUFFER_SIZE = 16
LETTER_ROUNDS = 10
LETTER_KEY = 8752
SUM_KEY = 8765
SHARED_KEY = 1212

_INT = struct.Struct("q")


class QueueFullError(Exception):
    """Raised when putting into a full queue."""


class QueueEmptyError(Exception):
    """Raised when taking from an empty queue."""


class BoundedQueue:
    """First-in first-out queue with a fixed capacity."""

    def __init__(self, capacity: int = QUEUE_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: deque[int] = deque()
        self._lock = threading.Lock()

    def put(self, value) -> None:
        """Append a value; raise QueueFullError if there is no room."""
        with self._lock:
            if len(self._items) >= self.capacity:
                raise QueueFullError("Capacidade da fila estourou.")
            self._items.append(value)

    def get(self):
        """Remove and return the oldest value; raise QueueEmptyError if none."""
        with self._lock:
            if not self._items:
                raise QueueEmptyError("Fila vazia.")
            return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)

    @property
    def full(self) -> bool:
        return len(self._items) >= self.capacity


def count_up(emit: Callable[[int], object], start: int = 1, stop: int = 20, delay: float = 1.0) -> None:
    """Emit start, start+1, ..., stop, pausing after each."""
    for value in range(start, stop + 1):
        emit(value)
        time.sleep(delay)


def count_down(emit: Callable[[int], object], start: int = 30, stop: int = 1, delay: float = 2.0) -> None:
    """Emit start, start-1, ..., stop, pausing after each."""
    for value in range(start, stop - 1, -1):
        emit(value)
        time.sleep(delay)


def run_counters(shared: bool = False, delay_up: float = 1.0, delay_down: float = 2.0) -> list[int]:
    """Run an ascending and a descending counter in two threads.

    With shared set, both threads print and advance one common counter
    starting at 0 instead of their own values. Returns what was printed.
    """
    emitted: list[int] = []
    lock = threading.Lock()
    common = itertools.count()

    def record(value: int) -> None:
        with lock:
            if shared:
                value = next(common)
            print(value)
            emitted.append(value)

    threads = [
        threading.Thread(target=count_up, args=(record, 1, 20, delay_up)),
        threading.Thread(target=count_down, args=(record, 30, 1, delay_down)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return emitted


def produce_consume(
    queue: BoundedQueue,
    produced: int = 64,
    consumed: int = 30,
    rng: random.Random | None = None,
    delay: float = 1.0,
) -> tuple[list[int], list[int]]:
    """A producer thread fills the queue with random numbers, a consumer drains it.

    The producer waits while the queue is full and gives up once the consumer
    has finished; the consumer waits while it is empty and gives up once the
    producer has finished. Returns (values produced, values consumed).
    """
    rng = rng if rng is not None else random.Random()
    made: list[int] = []
    taken: list[int] = []
    producer_done = threading.Event()
    consumer_done = threading.Event()

    def producer() -> None:
        try:
            while len(made) < produced:
                value = rng.randrange(RANDOM_LIMIT)
                if queue.full:
                    if consumer_done.is_set():
                        break
                    time.sleep(delay)
                    continue
                print(f"PRODUZI: {value}")
                queue.put(value)
                made.append(value)
                time.sleep(delay)
        finally:
            producer_done.set()

    def consumer() -> None:
        try:
            while len(taken) < consumed:
                if not len(queue):
                    if producer_done.is_set() and not len(queue):
                        break
                    time.sleep(2 * delay)
                    continue
                value = queue.get()
                print(f"CONSUMI:{value}")
                taken.append(value)
                time.sleep(2 * delay)
        finally:
            consumer_done.set()

    threads = [threading.Thread(target=producer), threading.Thread(target=consumer)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    return made, taken


def _print_char(char: str) -> None:
    print(char, end="", flush=True)


def interleave_letters(
    letter: str,
    rounds: int = LETTER_ROUNDS,
    lock=None,
    emit: Callable[[str], object] | None = None,
    rng: random.Random | None = None,
) -> str:
    """Emit the letter upper-cased and then lower-cased inside the lock, rounds times.

    Returns the characters emitted.
    """
    lock = lock if lock is not None else threading.Lock()
    emit = emit if emit is not None else _print_char
    rng = rng if rng is not None else random.Random()
    written = []
    for _ in range(rounds):
        with lock:
            emit(letter.upper())
            time.sleep(rng.randrange(3))
            emit(letter)
            written.append(letter.upper() + letter)
        time.sleep(rng.randrange(2))
    return "".join(written)


def accumulate(total, lock, step: int, rounds: int | None = None, rng: random.Random | None = None) -> int:
    """Add step to total.value inside the lock, rounds times or forever.

    Returns the final value.
    """
    rng = rng if rng is not None else random.Random()
    counter = itertools.count() if rounds is None else range(rounds)
    for _ in counter:
        with lock:
            total.value += step
            print(f"Somado {step}: {total.value}")
            time.sleep(rng.randrange(3))
        time.sleep(rng.randrange(2))
    return total.value


def exchange_buffers(
    stream: TextIO,
    emit: Callable[[str], object] = print,
    rounds: int | None = None,
    size: int = BUFFER_SIZE,
) -> list[str]:
    """A producer thread fills a buffer of size characters, a consumer emits it.

    Each character is the first one read from the stream, after which the rest
    of that line is skipped. Stops after rounds buffers or when the stream
    ends; a final partial buffer is still handed over. Returns the buffers.
    """
    slot: _queue.Queue = _queue.Queue(maxsize=1)

    def producer() -> None:
        try:
            count = 0
            while rounds is None or count < rounds:
                print("Produtor Executando area Critica")
                chars = []
                while len(chars) < size:
                    char = stream.read(1)
                    if not char:
                        break
                    chars.append(char)
                    stream.readline()
                if chars:
                    slot.put("".join(chars))
                    print("Produtor saindo area critica Buffer Lido")
                    count += 1
                if len(chars) < size:
                    break
        finally:
            slot.put(None)

    worker = threading.Thread(target=producer)
    worker.start()
    buffers = []
    while (buffer := slot.get()) is not None:
        print("Consumidor Executando area Critica")
        emit(buffer)
        print("COnsumidor saindo area critica, buffer escrito")
        buffers.append(buffer)
    worker.join()
    return buffers


class _FileLock:
    """Exclusive lock on a file, shared between unrelated processes."""

    def __init__(self, path: str):
        self.path = path
        self._fd: int | None = None

    def __enter__(self) -> "_FileLock":
        self._fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o666)
        fcntl.flock(self._fd, fcntl.LOCK_EX)
        return self

    def __exit__(self, *exc) -> None:
        fcntl.flock(self._fd, fcntl.LOCK_UN)
        os.close(self._fd)
        self._fd = None


class _SharedInt:
    """Integer kept in a named shared memory segment."""

    def __init__(self, name: str):
        try:
            self._segment = shared_memory.SharedMemory(name=name, create=True, size=_INT.size)
        except FileExistsError:
            self._segment = shared_memory.SharedMemory(name=name)
        resource_tracker.unregister("/" + self._segment.name, "shared_memory")

    @property
    def value(self) -> int:
        return _INT.unpack_from(self._segment.buf)[0]

    @value.setter
    def value(self, number: int) -> None:
        _INT.pack_into(self._segment.buf, 0, number)

    def close(self) -> None:
        self._segment.close()


def _lock_path(key: int) -> str:
    return os.path.join(tempfile.gettempdir(), f"syslabs_{key}.lock")


def _letters(creator: bool) -> None:
    lock = _FileLock(_lock_path(LETTER_KEY))
    letter = "x" if creator else "o"
    if creator:
        time.sleep(2)
    interleave_letters(letter, LETTER_ROUNDS, lock)
    print(f"\nProcesso {os.getpid()} terminou")
    if creator:
        time.sleep(10)
        with contextlib.suppress(FileNotFoundError):
            os.remove(lock.path)


def _sum(step: int) -> None:
    total = _SharedInt(f"syslabs_{SHARED_KEY}")
    try:
        total.value = 0
        accumulate(total, _FileLock(_lock_path(SUM_KEY)), step)
    finally:
        total.close()


_USAGE = "uso: sync {counters|shared|queue|letters [x]|sum STEP|buffers}"


def main(argv=None) -> int:
    """Run one of the thread and semaphore exercises."""
    args = sys.argv[1:] if argv is None else list(argv)
    command, rest = (args[0], args[1:]) if args else ("", [])
    try:
        if command == "counters":
            run_counters(False)
        elif command == "shared":
            run_counters(True)
        elif command == "queue":
            try:
                produce_consume(BoundedQueue(QUEUE_CAPACITY))
            except (QueueFullError, QueueEmptyError) as exc:
                print(exc)
                return 1
        elif command == "letters":
            _letters(bool(rest))
        elif command == "sum":
            if not rest or not rest[0].lstrip("+-").isdigit():
                print(_USAGE, file=sys.stderr)
                return 2
            _sum(int(rest[0]))
        elif command == "buffers":
            exchange_buffers(sys.stdin)
        else:
            print(_USAGE, file=sys.stderr)
            return 2
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())