"""Signal exercises: stopping and resuming children, time limits and handlers."""

from __future__ import annotations

import itertools
import os
import signal
import subprocess
import sys
import time
from typing import Callable, Iterator, Sequence

SLICE_SECONDS = 2
ALTERNATE_ROUNDS = 10
ROTATION_SLICES = (1, 2, 2)
FIRST_MINUTE = 60
FIRST_MINUTE_RATE = 2
LATER_RATE = 1
DIVISION_BY_ZERO = "Divisão nao pode ser feita por 0!"


def call_cost_cents(seconds: int) -> int:
    """Cost of a call: 2 cents a second for the first minute, 1 cent after."""
    if seconds < 0:
        raise ValueError("duration cannot be negative")
    if seconds <= FIRST_MINUTE:
        return seconds * FIRST_MINUTE_RATE
    return FIRST_MINUTE * FIRST_MINUTE_RATE + (seconds - FIRST_MINUTE) * LATER_RATE


def format_call(seconds: int) -> str:
    """Duration and cost lines printed when a call ends."""
    minutes, rest = divmod(seconds, 60)
    reais, cents = divmod(call_cost_cents(seconds), 100)
    return (
        f"Chamada terminada. Duracao: {minutes} m {rest} s \n"
        f"Custo ligacao: R${reais},{cents:02d}"
    )


class CallMeter:
    """Times calls between a 'received' and an 'ended' event."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.started: float | None = None

    def call_received(self) -> None:
        """Start timing a call."""
        print("Chamada recebida!")
        self.started = self.clock()

    def call_ended(self) -> int:
        """Print duration and cost; return the duration in whole seconds."""
        if self.started is None:
            raise RuntimeError("no call has been received")
        seconds = int(self.clock() - self.started)
        print(format_call(seconds))
        return seconds


def arithmetic_report(first: int, second: int) -> Iterator[str]:
    """Yield sum, difference, product and truncated quotient lines.

    Raises ZeroDivisionError after the first three lines if second is 0.
    """
    yield f"Soma {first + second}"
    yield f"Diferenca {first - second}"
    yield f"Multiplicacao: {first * second}"
    if second == 0:
        raise ZeroDivisionError(DIVISION_BY_ZERO)
    quotient = abs(first) // abs(second)
    if (first < 0) != (second < 0):
        quotient = -quotient
    yield f"Divisao: {quotient}"


def _busy_child() -> int:
    sys.stdout.flush()
    sys.stderr.flush()
    pid = os.fork()
    if pid:
        return pid
    try:
        while True:
            pass
    finally:
        os._exit(0)


def alternate_children(rounds: int = ALTERNATE_ROUNDS, slice_seconds: float = SLICE_SECONDS) -> tuple[int, int]:
    """Let two busy children run in turn, then kill both. Return their pids."""
    first = _busy_child()
    second = _busy_child()
    try:
        for _ in range(rounds):
            os.kill(first, signal.SIGCONT)
            os.kill(second, signal.SIGSTOP)
            print(f"[1] Executando filho pid: {first}.")
            time.sleep(slice_seconds)
            os.kill(first, signal.SIGSTOP)
            os.kill(second, signal.SIGCONT)
            print(f"[2] Executando filho pid: {second}.")
            time.sleep(slice_seconds)
    finally:
        for pid in (first, second):
            os.kill(pid, signal.SIGKILL)
            os.waitpid(pid, 0)
    print("Terminando execucao.")
    return first, second


def time_limit(command: Sequence[str], delay: float) -> int | None:
    """Run command; kill it after delay seconds.

    Returns its exit code, or None if it was killed for exceeding the limit.
    """
    argv = list(command)
    process = subprocess.Popen(argv)
    try:
        status = process.wait(timeout=delay)
    except subprocess.TimeoutExpired:
        print(f"Program {argv[0]} exceeded limit of {delay} seconds!")
        process.kill()
        process.wait()
        return None
    print(
        f"Child {process.pid} terminated within {delay} seconds com estado {status}."
    )
    return status


def rotate_programs(commands: Sequence[Sequence[str]], slices: Sequence[float] = ROTATION_SLICES) -> list[int]:
    """Start each command stopped, then run them in turn for their slice.

    Continues until every program has exited; returns their exit codes.
    """
    argvs = [list(command) for command in commands]
    durations = list(slices)
    if len(argvs) != len(durations):
        raise ValueError("one slice is needed for each command")
    print(" ".join(argv[0] for argv in argvs))
    processes: list[subprocess.Popen] = []
    try:
        for argv in argvs:
            process = subprocess.Popen(argv)
            process.send_signal(signal.SIGSTOP)
            processes.append(process)
        while any(process.poll() is None for process in processes):
            for process, seconds in zip(processes, durations):
                if process.poll() is not None:
                    continue
                process.send_signal(signal.SIGCONT)
                time.sleep(seconds)
                process.send_signal(signal.SIGSTOP)
    finally:
        for process in processes:
            if process.poll() is None:
                process.kill()
            process.wait()
    return [process.returncode for process in processes]


def io_bound(label, count: int | None = None) -> int:
    """Print 'IO Bound <label>' count times, or forever; return lines printed."""
    line = f"IO Bound {label}"
    printed = 0
    for _ in itertools.count() if count is None else range(count):
        print(line)
        printed += 1
    return printed


def _wait_for_signals() -> None:
    while True:
        signal.pause()


def _ctrl_c() -> None:
    interrupts = 0

    def on_interrupt(signum, frame):
        nonlocal interrupts
        interrupts += 1
        print("Você pressionou Ctrl-C")

    def on_quit(signum, frame):
        print("Terminando o processo...")
        sys.exit(0)

    signal.signal(signal.SIGINT, on_interrupt)
    signal.signal(signal.SIGQUIT, on_quit)
    print("Ctrl-C desabilitado. Use Ctrl-\\ para terminar")
    _wait_for_signals()


def _sigkill() -> None:
    try:
        signal.signal(signal.SIGKILL, lambda signum, frame: print("Você tentou dar kill"))
    except (OSError, ValueError) as exc:
        print(f"Manipulador de SIGKILL nao instalado: {exc}")
    print("Use Ctrl-C para terminar")
    _wait_for_signals()


def _phone() -> None:
    meter = CallMeter()

    def on_end(signum, frame):
        try:
            meter.call_ended()
        except RuntimeError as exc:
            print(exc)

    signal.signal(signal.SIGUSR1, lambda signum, frame: meter.call_received())
    signal.signal(signal.SIGUSR2, on_end)
    print(f"Pid: {os.getpid()}")
    _wait_for_signals()


_USAGE = (
    "uso: signals {alternate|limit DELAY COMMAND...|ctrl-c|sigkill|divide|phone|"
    "rotate P1 P2 P3|io LABEL}"
)


def main(argv=None) -> int:
    """Run one of the signal exercises."""
    args = sys.argv[1:] if argv is None else list(argv)
    command, rest = (args[0], args[1:]) if args else ("", [])
    try:
        if command == "alternate":
            alternate_children(ALTERNATE_ROUNDS, SLICE_SECONDS)
        elif command == "limit":
            if len(rest) < 2:
                print(_USAGE, file=sys.stderr)
                return 2
            time_limit(rest[1:], int(rest[0]))
        elif command == "ctrl-c":
            _ctrl_c()
        elif command == "sigkill":
            _sigkill()
        elif command == "divide":
            print("Insira 2 numeros.")
            tokens = sys.stdin.read().split()
            if len(tokens) < 2:
                print("Esperados 2 numeros.", file=sys.stderr)
                return 1
            try:
                for line in arithmetic_report(int(tokens[0]), int(tokens[1])):
                    print(line)
            except ZeroDivisionError as exc:
                print(exc)
                return 1
        elif command == "phone":
            _phone()
        elif command == "rotate":
            if len(rest) != len(ROTATION_SLICES):
                print(_USAGE, file=sys.stderr)
                return 2
            rotate_programs([[path] for path in rest], ROTATION_SLICES)
        elif command == "io":
            io_bound(rest[0] if rest else "1")
        else:
            print(_USAGE, file=sys.stderr)
            return 2
    except KeyboardInterrupt:
        return 130
    except BrokenPipeError:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())