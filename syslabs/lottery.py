"""Lottery scheduler: runs jobs for a time slice chosen by drawing a ticket."""

from __future__ import annotations

import random
import sys
import time
from collections import deque
from typing import Callable, Iterable, TextIO

from .jobs import InvalidProgramError, Job, JobSpec, JobStatus, parse_jobs, spawn_stopped
from .tickets import MAX_TICKETS, TicketPool, find_owner

HEADER = "Escalonamento escolhido: LOTERIA\n"


class LotteryScheduler:
    """Lottery scheduling of stopped processes, logging to a text stream and stdout."""

    def __init__(
        self,
        out: TextIO | None = None,
        launcher: Callable[[JobSpec], Job] | None = None,
        rng: random.Random | None = None,
        slice_seconds: float = 1.0,
        arrival_interval: float = 3.0,
    ):
        self.out = out
        self.launcher = launcher if launcher is not None else spawn_stopped
        self.pool = TicketPool(MAX_TICKETS, rng)
        self.slice_seconds = slice_seconds
        self.arrival_interval = arrival_interval
        self.jobs: list[Job] = []

    def _log(self, text: str, console: bool = True) -> None:
        if console:
            print(text, end="")
        if self.out is not None:
            self.out.write(text)

    def admit(self, spec: JobSpec) -> Job:
        """Start a job stopped and give it its tickets."""
        try:
            job = self.launcher(spec)
        except (InvalidProgramError, OSError):
            self._log(
                f"Não foi possivel criar o processo ou o programa {spec.name} nao existe...\n",
                console=False,
            )
            raise
        try:
            job.tickets = [self.pool.draw() for _ in range(spec.value or 0)]
        except IndexError:
            self.pool.release(job.tickets)
            job.kill()
            raise
        job.status = JobStatus.READY
        self.jobs.append(job)
        tickets = "".join(f"{ticket} " for ticket in job.tickets)
        self._log(
            "\n -----------\nEntrada de novo processo na fila\n"
            f"Nome: {job.name}\nPid: {job.pid}\nBilhetes: {tickets}"
            "\n---------------\n\n"
        )
        return job

    def step(self) -> Job | None:
        """Draw a ticket and run its owner for one slice; return that job."""
        if not self.pool.assigned:
            return None
        ticket = self.pool.pick_winner()
        index = find_owner(self.jobs, ticket)
        if index is None:
            return None
        job = self.jobs[index]
        self._log(f"Bilhete sorteado: {ticket}\n")
        if job.status is JobStatus.READY:
            self._log(f"Em execucao - Programa {job.name} - Pid {job.pid}\n")
            job.resume()
            time.sleep(self.slice_seconds)
            if job.poll():
                self._log(f"Programa {job.name} terminou sua execução...\n\n")
                self.pool.release(job.tickets)
                job.tickets = []
                job.status = JobStatus.FINISHED
            else:
                self._log(f"Pausando - Programa {job.name}\n\n")
                job.pause()
        return job

    def _has_work(self) -> bool:
        return any(job.status is JobStatus.READY and job.tickets for job in self.jobs)

    def run(self, specs: Iterable[JobSpec]) -> list[Job]:
        """Admit one job per arrival interval and schedule until all have finished."""
        pending = deque(specs)
        self._log(HEADER, console=False)
        last_arrival: float | None = None
        try:
            while pending or self._has_work():
                now = time.monotonic()
                if pending and (
                    last_arrival is None or now - last_arrival >= self.arrival_interval
                ):
                    self.admit(pending.popleft())
                    last_arrival = now
                if self.step() is None and pending and last_arrival is not None:
                    time.sleep(
                        max(0.0, last_arrival + self.arrival_interval - time.monotonic())
                    )
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
            LotteryScheduler(out).run(specs)
        except (InvalidProgramError, OSError, IndexError) as exc:
            print(exc, file=sys.stderr)
            return 1
    print("Escalonamento chegou ao fim!")
    return 0


if __name__ == "__main__":
    sys.exit(main())