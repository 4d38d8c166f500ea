"""Process creation, exec and shared-memory exercises built on fork."""

from __future__ import annotations

import math
import mmap
import os
import random
import struct
import subprocess
import sys
from multiprocessing import resource_tracker, shared_memory
from typing import Callable, Iterable, Sequence

MESSAGE_KEY = 8752
MAX_MESSAGE = 140
SEGMENT_SIZE = MAX_MESSAGE + 1
DEFAULT_MESSAGE_NAME = f"syslabs_{MESSAGE_KEY}"
SHARED_INITIAL = 8752
CHILD_INCREMENT = 5
PARENT_INCREMENT = 10
SORT_COUNT = 10
MATRIX_SIZE = 4
MATRIX_MAX = 10
SEARCH_VALUES = (30, 10, 90, 40, 60, 50, 70, 20, 80)
SEARCH_TARGET = 50
SEARCH_PARTS = 3

_INT = struct.Struct("q")


def _fork(work: Callable[[], object]) -> int:
    """Run work in a child process and return the child's pid."""
    sys.stdout.flush()
    sys.stderr.flush()
    pid = os.fork()
    if pid:
        return pid
    try:
        work()
        sys.stdout.flush()
    except BaseException:
        os._exit(1)
    os._exit(0)


def _wait(pid: int) -> int:
    _, status = os.waitpid(pid, 0)
    return os.waitstatus_to_exitcode(status)


def _child_result(work: Callable[[], bytes]) -> bytes:
    """Run work in a child and return the bytes it produced."""
    read_fd, write_fd = os.pipe()

    def child() -> None:
        os.close(read_fd)
        with os.fdopen(write_fd, "wb") as sink:
            sink.write(work())

    pid = _fork(child)
    os.close(write_fd)
    with os.fdopen(read_fd, "rb") as source:
        data = source.read()
    if _wait(pid) != 0:
        raise ChildProcessError(f"child process {pid} failed")
    return data


def format_vector(values: Iterable[int]) -> str:
    """Values separated and followed by a space."""
    return "".join(f"{value} " for value in values)


def report_pids() -> tuple[int, int]:
    """Fork; each side prints its pid. Return (parent pid, child pid)."""
    parent = os.getpid()
    child = _fork(lambda: print(f"Filho pid: {os.getpid()}"))
    print(f"Pai pid: {parent}")
    _wait(child)
    return parent, child


def child_value_isolation() -> tuple[int, int]:
    """Show that a child's change to a variable is not seen by the parent.

    Returns (value in the parent, value in the child).
    """
    value = 1
    print(f"Valor: {value}")

    def child() -> bytes:
        nonlocal value
        value = 5
        print(f"Valor no processo filho: {value}")
        return str(value).encode()

    child_value = int(_child_result(child))
    print(f"Valor no processo pai: {value}")
    return value, child_value


def sort_in_child(values: Iterable[int]) -> tuple[list[int], list[int]]:
    """Sort a copy in a child process; return (parent's values, child's values)."""
    values = list(values)

    def child() -> bytes:
        values.sort()
        print(format_vector(values))
        return " ".join(map(str, values)).encode()

    data = _child_result(child)
    print(format_vector(values))
    return values, [int(token) for token in data.split()]


def run_program(path: str, args: Sequence[str] | None = None) -> int:
    """Run the executable at path with the given argv and return its exit code."""
    argv = list(args) if args else [os.path.basename(path)]
    return subprocess.run(argv, executable=path, check=False).returncode


def shared_increment(initial: int = SHARED_INITIAL) -> tuple[int, int]:
    """Child adds 5 and parent then adds 10 to one shared integer.

    Returns (value seen by the child, final value seen by the parent).
    """
    with mmap.mmap(-1, _INT.size) as shared:
        _INT.pack_into(shared, 0, initial)

        def child() -> None:
            value = _INT.unpack_from(shared)[0] + CHILD_INCREMENT
            _INT.pack_into(shared, 0, value)
            print(f"Processo filho = {value}")

        if _wait(_fork(child)) != 0:
            raise ChildProcessError("child process failed")
        child_value = _INT.unpack_from(shared)[0]
        parent_value = child_value + PARENT_INCREMENT
        _INT.pack_into(shared, 0, parent_value)
        print(f"Processo pai = {parent_value}")
    return child_value, parent_value


def random_matrix(rows: int, cols: int, rng: random.Random | None = None) -> list[list[int]]:
    """Matrix of random integers from 0 to 10."""
    rng = rng if rng is not None else random.Random()
    return [[rng.randint(0, MATRIX_MAX) for _ in range(cols)] for _ in range(rows)]


def format_matrix(matrix: Iterable[Iterable[int]]) -> str:
    """One line per row, each value followed by a space."""
    return "".join(format_vector(row) + "\n" for row in matrix)


def add_matrices(first: Sequence[Sequence[int]], second: Sequence[Sequence[int]]) -> list[list[int]]:
    """Sum two matrices, one child process per row writing into shared memory."""
    if len(first) != len(second):
        raise ValueError("matrices must have the same shape")
    if not first:
        return []
    cols = len(first[0])
    if any(len(row) != cols for row in (*first, *second)):
        raise ValueError("matrices must have the same shape")
    if cols == 0:
        return [[] for _ in first]

    row_format = struct.Struct(f"{cols}q")
    with mmap.mmap(-1, row_format.size * len(first)) as shared:

        def row_worker(index: int, left: Sequence[int], right: Sequence[int]):
            def work() -> None:
                sums = (a + b for a, b in zip(left, right))
                row_format.pack_into(shared, index * row_format.size, *sums)
            return work

        pids = [
            _fork(row_worker(index, left, right))
            for index, (left, right) in enumerate(zip(first, second))
        ]
        statuses = [_wait(pid) for pid in pids]
        if any(statuses):
            raise ChildProcessError("a row worker failed")
        return [
            list(row_format.unpack_from(shared, index * row_format.size))
            for index in range(len(first))
        ]


def store_message(message: str, name: str = DEFAULT_MESSAGE_NAME) -> str:
    """Store the first line of message, at most 140 bytes, in a new named segment.

    The segment outlives this process. Raises FileExistsError if it already exists.
    """
    text = message.lstrip()
    if not text:
        raise ValueError("empty message")
    data = text.split("\n", 1)[0].encode("utf-8")[:MAX_MESSAGE]
    segment = shared_memory.SharedMemory(name=name, create=True, size=SEGMENT_SIZE)
    try:
        segment.buf[: len(data)] = data
        segment.buf[len(data)] = 0
    finally:
        segment.close()
    resource_tracker.unregister("/" + segment.name, "shared_memory")
    return data.decode("utf-8", errors="ignore")


def load_message(name: str = DEFAULT_MESSAGE_NAME) -> str:
    """Read the message from a named segment and remove the segment."""
    segment = shared_memory.SharedMemory(name=name)
    try:
        raw = bytes(segment.buf)
    finally:
        segment.close()
        segment.unlink()
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="ignore")


def parallel_search(
    values: Sequence[int], target: int = SEARCH_TARGET, parts: int = SEARCH_PARTS
) -> list[int]:
    """Search for target with one child process per slice; return sorted positions."""
    if parts < 1:
        raise ValueError("parts must be at least 1")
    values = list(values)
    size = math.ceil(len(values) / parts) if values else 0
    starts = range(0, len(values), size) if size else range(0)

    read_fd, write_fd = os.pipe()

    def searcher(start: int):
        def work() -> None:
            os.close(read_fd)
            for position, value in enumerate(values[start:start + size], start):
                if value == target:
                    print(f"Procurado esta na posicao {position}")
                    os.write(write_fd, f"{position}\n".encode())
        return work

    try:
        pids = [_fork(searcher(start)) for start in starts]
    finally:
        os.close(write_fd)
    with os.fdopen(read_fd, "rb") as source:
        data = source.read()
    if any(_wait(pid) for pid in pids):
        raise ChildProcessError("a search worker failed")
    return sorted(int(token) for token in data.split())


_USAGE = (
    "uso: processes {pids|value|sort|echo|exec PROG [ARGS...]|shared|matrix|"
    "motd-write|motd-read|search}"
)


def main(argv=None) -> int:
    """Run one of the process exercises."""
    args = sys.argv[1:] if argv is None else list(argv)
    command, rest = (args[0], args[1:]) if args else ("", [])
    if command == "pids":
        report_pids()
    elif command == "value":
        child_value_isolation()
    elif command == "sort":
        tokens = sys.stdin.read().split()
        if len(tokens) < SORT_COUNT:
            print(f"Esperados {SORT_COUNT} numeros.", file=sys.stderr)
            return 1
        numbers = [int(token) for token in tokens[:SORT_COUNT]]
        print(format_vector(numbers))
        sort_in_child(numbers)
    elif command == "echo":
        run_program("/bin/echo", ["echo", "Hello World"])
    elif command == "exec":
        if not rest:
            print(_USAGE, file=sys.stderr)
            return 2
        run_program(rest[0], rest)
    elif command == "shared":
        shared_increment(SHARED_INITIAL)
    elif command == "matrix":
        rng = random.Random()
        first = random_matrix(MATRIX_SIZE, MATRIX_SIZE, rng)
        second = random_matrix(MATRIX_SIZE, MATRIX_SIZE, rng)
        print("Primeira matriz")
        print(format_matrix(first), end="")
        print("Segunda matriz")
        print(format_matrix(second), end="")
        third = add_matrices(first, second)
        print("Terceira matriz")
        print(format_matrix(third), end="")
    elif command == "motd-write":
        print("Insira mensagem do dia")
        try:
            store_message(sys.stdin.read())
        except (FileExistsError, ValueError):
            print("Erro na criação de segmento de memoria compartilhada.")
            return 1
    elif command == "motd-read":
        try:
            text = load_message()
        except FileNotFoundError:
            print("Erro segment.")
            return 1
        print(f"Mensagem do dia: {text}")
    elif command == "search":
        parallel_search(SEARCH_VALUES, SEARCH_TARGET, SEARCH_PARTS)
    else:
        print(_USAGE, file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())