"""Priority-list scheduler: always runs the ready job with the best priority."""

from __future__ import annotations

import sys
import time
from collections import deque
from typing import Callable, Iterable, Sequence, TextIO

from .jobs import InvalidProgramError, Job, JobSpec, JobStatus, parse_jobs, spawn_stopped

HEADER = "Escalonamento escolhido: LISTA DE PRIORIDADES\n"
MIN_PRIORITY = 1
MAX_PRIORITY = 7
INVALID_PRIORITY = "Prioridade invalida..."


def validate_priority(value) -> int:
    """Return the priority if it lies in 1..7, otherwise raise ValueError."""
    if value is None or not MIN_PRIORITY <= value <= MAX_PRIORITY:
        raise ValueError(INVALID_PRIORITY)
    return value


def select_next(jobs: Sequence[Job]) -> Job | None:
    """Ready job with the lowest priority value, or None if none is ready.

    The search starts from the last ready job and only moves to a job with a
    strictly lower value, so among equals the last ready job is kept when it
    already holds the best value, and otherwise the first job with that value.
    """
    ready = [job for job in jobs if job.status is JobStatus.READY]
    if not ready:
        return None
    chosen = ready[-1]
    for job in ready:
        if job.spec.value < chosen.spec.value:
            chosen = job
    return chosen


class PriorityScheduler:
    """Priority scheduling of stopped processes, logging to a text stream and stdout."""

    def __init__(
        self,
        out: TextIO | None = None,
        launcher: Callable[[JobSpec], Job] | None = None,
        slice_seconds: float = 3.0,
        arrival_interval: float = 3.0,
    ):
        self.out = out
        self.launcher = launcher if launcher is not None else spawn_stopped
        self.slice_seconds = slice_seconds
        self.arrival_interval = arrival_interval
        self.elapsed = 0.0
        self.jobs: list[Job] = []

    def _log(self, text: str, console: bool = True) -> None:
        if console:
            print(text, end="")
        if self.out is not None:
            self.out.write(text)

    def admit(self, spec: JobSpec) -> Job:
        """Check the job's priority, start it stopped and queue it."""
        try:
            validate_priority(spec.value)
        except ValueError:
            self._log(INVALID_PRIORITY + "\n", console=False)
            raise
        try:
            job = self.launcher(spec)
        except (InvalidProgramError, OSError):
            self._log(
                f"Não foi possivel criar o processo ou o programa {spec.name} nao existe...\n",
                console=False,
            )
            raise
        job.status = JobStatus.READY
        self.jobs.append(job)
        self._log(
            "\n -----------\nEntrada de novo processo na fila\n"
            f"Nome: {job.name}\nPid: {job.pid}\nPrioridade: {spec.value}\n"
            "---------------\n\n"
        )
        return job

    def step(self) -> Job | None:
        """Run the best ready job for one slice; return it, or None if none is ready."""
        job = select_next(self.jobs)
        if job is None:
            return None
        self._log(f"Em execucao - programa {job.name}\n")
        job.resume()
        time.sleep(self.slice_seconds)
        if job.poll():
            self._log(f"Programa {job.name} terminou sua execução...\n\n")
            job.status = JobStatus.FINISHED
        else:
            job.pause()
        self.elapsed += self.slice_seconds
        return job

    def _has_ready(self) -> bool:
        return any(job.status is JobStatus.READY for job in self.jobs)

    def run(self, specs: Iterable[JobSpec]) -> list[Job]:
        """Admit a job each time an arrival interval of run time has passed; run until all finish."""
        pending = deque(specs)
        self._log(HEADER, console=False)
        self.elapsed = self.arrival_interval
        try:
            while pending or self._has_ready():
                if pending and (
                    self.elapsed >= self.arrival_interval or not self._has_ready()
                ):
                    self.admit(pending.popleft())
                    self.elapsed = 0.0
                self.step()
        finally:
            for job in self.jobs:
                if job.status is not JobStatus.FINISHED:
                    job.kill()
        return self.jobs


def main(argv=None) -> int:
    """Command line: [EXEC_FILE [OUTPUT_FILE]], defaults exec.txt and saida.txt."""
    args = sys.argv[1:] if argv is None else list(argv)
    exec_path = args[0] if args else "exec.txt"
    out_path = args[1] if len(args) > 1 else "saida.txt"
    try:
        source = open(exec_path, encoding="utf-8")
    except OSError:
        print("Erro na abertura de arquivo...", file=sys.stderr)
        return 1
    with source:
        specs = list(parse_jobs(source))
    try:
        out = open(out_path, "w", encoding="utf-8")
    except OSError:
        print("Erro na abertura de arquivo...", file=sys.stderr)
        return 1
    with out:
        try:
            PriorityScheduler(out).run(specs)
        except ValueError:
            out.write("Erro no interpretador\n")
            return 1
        except (InvalidProgramError, OSError) as exc:
            print(exc, file=sys.stderr)
            return 1
    print("Escalonamento chegou ao fim!")
    return 0


if __name__ == "__main__":
    sys.exit(main())