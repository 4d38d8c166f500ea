"""Pipe, descriptor redirection and named FIFO exercises."""

from __future__ import annotations

import os
import re
import subprocess
import sys
from typing import Iterable, Iterator, Sequence

from .processes import _fork, _wait

PIPE_TEXT = "Pai, feliz dia dos pais"
SCALE_FACTOR = 10
FIFO_CHUNK = 100
STOP_WORD = "PARA"
DEFAULT_FIFO = "minhaFifo"
DEFAULT_SHARED_FIFO = "minhaFifo2"
FIRST_WRITER = ("PRIMEIRO FILHO", "Escrito primeira msg no FIFO")
SECOND_WRITER = ("SEGUNDO FILHO", "Escrito segunda msg no FIFO")
FIFO_OPEN_ERROR = "Erro ao abrir a FIFO para escrita"

_INTEGER = re.compile(r"\s*([+-]?\d+)")


def pipe_message(text: str = PIPE_TEXT) -> str:
    """Send text from a child to the parent through a pipe; return what arrived."""
    read_fd, write_fd = os.pipe()

    def child() -> None:
        os.close(read_fd)
        os.write(write_fd, text.encode("utf-8") + b"\0")

    pid = _fork(child)
    os.close(write_fd)
    with os.fdopen(read_fd, "rb") as source:
        data = source.read()
    if _wait(pid) != 0:
        raise ChildProcessError(f"child process {pid} failed")
    message = data.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    print(message)
    return message


def _leading_integers(text: str) -> Iterator[int]:
    """Integers read in order until the first thing that is not one."""
    position = 0
    while True:
        match = _INTEGER.match(text, position)
        if match is None:
            return
        yield int(match.group(1))
        position = match.end()


def scale_numbers(source, target, factor: int = SCALE_FACTOR) -> list[int]:
    """Write 'Mult: N' for every integer of source multiplied by factor.

    The target is created if needed and written from its start without being
    truncated. Returns the products written.
    """
    with open(source, encoding="utf-8") as reader:
        products = [value * factor for value in _leading_integers(reader.read())]
    fd = os.open(target, os.O_WRONLY | os.O_CREAT, 0o666)
    with os.fdopen(fd, "w", encoding="utf-8") as writer:
        writer.writelines(f"Mult: {value}\n" for value in products)
    return products


def pipe_commands(producer: Sequence[str], consumer: Sequence[str]) -> str:
    """Run producer with its output piped into consumer; return consumer's output."""
    with subprocess.Popen(list(producer), stdout=subprocess.PIPE) as first:
        with subprocess.Popen(
            list(consumer), stdin=first.stdout, stdout=subprocess.PIPE
        ) as second:
            first.stdout.close()
            output, _ = second.communicate()
        first.wait()
    return output.decode("utf-8", errors="replace")


def create_fifo(path=DEFAULT_FIFO):
    """Create a named FIFO readable and writable by its owner."""
    os.mkfifo(path, 0o600)
    return path


def write_fifo(path=DEFAULT_FIFO, lines: Iterable[str] = (), stop: str = STOP_WORD) -> int:
    """Write each line, without its newline, until the stop word; return lines written."""
    written = 0
    with open(path, "wb", buffering=0) as fifo:
        for line in lines:
            text = line[:-1] if line.endswith("\n") else line
            if text == stop:
                break
            fifo.write(text.encode("utf-8"))
            written += 1
    return written


def read_fifo(path=DEFAULT_FIFO) -> Iterator[str]:
    """Yield the text of each chunk of up to 100 bytes read from the FIFO."""
    with open(path, "rb", buffering=0) as fifo:
        while chunk := fifo.read(FIFO_CHUNK):
            yield chunk.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def _fifo_writer(path, message: str, announcement: str):
    def work() -> None:
        try:
            fd = os.open(path, os.O_WRONLY)
        except OSError:
            print(FIFO_OPEN_ERROR)
            raise
        try:
            print(announcement)
            os.write(fd, message.encode("utf-8").ljust(FIFO_CHUNK, b"\0")[:FIFO_CHUNK])
        finally:
            os.close(fd)
    return work


def fifo_two_writers(path=DEFAULT_SHARED_FIFO) -> list[str]:
    """Two children each write a message into a new FIFO; the parent reads both."""
    create_fifo(path)
    print("FIFO criada com sucesso")
    pids = [
        _fork(_fifo_writer(path, message, announcement))
        for message, announcement in (FIRST_WRITER, SECOND_WRITER)
    ]
    with open(path, "rb", buffering=0) as fifo:
        failures = [_wait(pid) for pid in pids]
        messages = []
        while chunk := fifo.read(FIFO_CHUNK):
            text = chunk.split(b"\0", 1)[0].decode("utf-8", errors="replace")
            print(f"Lido do Fifo: {text}")
            messages.append(text)
    if any(failures):
        raise ChildProcessError("a FIFO writer failed")
    return messages


_USAGE = (
    "uso: ipc {pipe|scale [IN OUT]|ls-cat|mkfifo [PATH]|write [PATH]|"
    "read [PATH]|two-writers [PATH]}"
)


def main(argv=None) -> int:
    """Run one of the pipe and FIFO exercises."""
    args = sys.argv[1:] if argv is None else list(argv)
    command, rest = (args[0], args[1:]) if args else ("", [])
    if command == "pipe":
        pipe_message(PIPE_TEXT)
    elif command == "scale":
        source = rest[0] if rest else "entrada.txt"
        target = rest[1] if len(rest) > 1 else "saida.txt"
        try:
            scale_numbers(source, target, SCALE_FACTOR)
        except OSError as exc:
            print(exc, file=sys.stderr)
            return 1
    elif command == "ls-cat":
        print(pipe_commands(["ls"], ["cat"]), end="")
    elif command == "mkfifo":
        try:
            create_fifo(rest[0] if rest else DEFAULT_FIFO)
        except OSError:
            print("Erro na criação da FIFO")
            return 1
        print("FIFO criada com sucesso")
    elif command == "write":
        try:
            write_fifo(rest[0] if rest else DEFAULT_FIFO, sys.stdin, STOP_WORD)
        except OSError:
            print(FIFO_OPEN_ERROR)
            return 1
    elif command == "read":
        try:
            for text in read_fifo(rest[0] if rest else DEFAULT_FIFO):
                print(f"Lido Fifo: {text}")
        except OSError:
            print(FIFO_OPEN_ERROR)
            return 1
    elif command == "two-writers":
        try:
            fifo_two_writers(rest[0] if rest else DEFAULT_SHARED_FIFO)
        except FileExistsError:
            print("Erro na criação da FIFO")
            return 1
        except (OSError, ChildProcessError) as exc:
            print(exc, file=sys.stderr)
            return 1
    else:
        print(_USAGE, file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())