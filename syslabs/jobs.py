"""Job descriptions read from an exec file, and the stopped processes that run them."""

from __future__ import annotations

import os
import re
import signal
import subprocess
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

PROGRAM_PREFIX = "programa"
MAX_PROGRAM = 7
CHILD_ARGV0 = "nada"

_INTEGER = re.compile(r"[+-]?\d+")
_ATTACHED = re.compile(r"(.*=)([+-]?\d+)")


class InvalidProgramError(Exception):
    """Raised when a job names a program that cannot be started."""


class JobStatus(Enum):
    """Scheduling state of a job."""

    READY = 0
    FINISHED = 1
    PENDING = 2


@dataclass(frozen=True)
class JobSpec:
    """One 'exec' entry: the program name and its numeric setting."""

    name: str
    value: int | None = None
    label: str = ""


@dataclass
class Job:
    """A started program under the control of a scheduler."""

    spec: JobSpec
    process: subprocess.Popen
    status: JobStatus = JobStatus.READY
    tickets: list[int] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def pid(self) -> int:
        return self.process.pid

    def resume(self) -> None:
        """Let the process run."""
        self.process.send_signal(signal.SIGCONT)

    def pause(self) -> None:
        """Stop the process."""
        self.process.send_signal(signal.SIGSTOP)

    def poll(self) -> bool:
        """Return True if the process has terminated."""
        return self.process.poll() is not None

    def kill(self) -> None:
        """Terminate the process and reap it."""
        if self.process.poll() is None:
            self.process.send_signal(signal.SIGKILL)
        self.process.wait()
        self.status = JobStatus.FINISHED


def program_number(name: str) -> int:
    """Number N of a program called 'programaN', N from 1 to 7."""
    suffix = name[len(PROGRAM_PREFIX):] if name.startswith(PROGRAM_PREFIX) else ""
    if suffix.isdigit() and len(suffix) == 1 and 1 <= int(suffix) <= MAX_PROGRAM:
        return int(suffix)
    raise InvalidProgramError(
        "Nome do programa invalido. Não foi possivel criar o processo"
    )


def parse_jobs(lines: Iterable[str]) -> Iterator[JobSpec]:
    """Yield a JobSpec for each 'exec NAME LABEL VALUE' entry.

    A value that is not an integer is left to be read as the next entry's
    keyword; a value written straight after the label ('numtickets=5') is
    accepted too.
    """
    tokens = deque(token for line in lines for token in line.split())
    while tokens:
        tokens.popleft()
        name = tokens.popleft() if tokens else ""
        if not tokens:
            yield JobSpec(name)
            continue
        label = tokens.popleft()
        attached = _ATTACHED.fullmatch(label)
        if attached:
            yield JobSpec(name, int(attached.group(2)), attached.group(1))
        elif tokens and _INTEGER.fullmatch(tokens[0]):
            yield JobSpec(name, int(tokens.popleft()), label)
        else:
            yield JobSpec(name, None, label)


def spawn_stopped(spec: JobSpec, command=None) -> Job:
    """Start the job's program and stop it at once.

    Without a command the executable './programaN' from the working
    directory is started.
    """
    program_number(spec.name)
    if command is None:
        process = subprocess.Popen(
            [CHILD_ARGV0], executable=os.path.join(".", spec.name)
        )
    else:
        process = subprocess.Popen(list(command))
    process.send_signal(signal.SIGSTOP)
    return Job(spec, process)