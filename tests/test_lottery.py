import io
import random
import signal

import pytest

from syslabs.jobs import InvalidProgramError, Job, JobSpec, JobStatus
from syslabs.lottery import HEADER, LotteryScheduler, main
from syslabs.tickets import MAX_TICKETS


class FakeProcess:
    def __init__(self, pid, runs):
        self.pid = pid
        self.remaining = runs
        self.signals = []
        self.returncode = None

    def send_signal(self, sig):
        self.signals.append(sig)
        if sig == signal.SIGCONT:
            self.remaining -= 1
        elif sig == signal.SIGKILL:
            self.returncode = -signal.SIGKILL

    def poll(self):
        if self.returncode is None and self.remaining <= 0:
            self.returncode = 0
        return self.returncode

    def wait(self):
        return self.poll()


def make_scheduler(runs, seed=0):
    out = io.StringIO()
    pids = iter(range(100, 200))

    def launcher(spec):
        return Job(spec, FakeProcess(next(pids), runs[spec.name]))

    scheduler = LotteryScheduler(
        out, launcher, random.Random(seed), slice_seconds=0, arrival_interval=0
    )
    return scheduler, out


def test_admit_assigns_tickets():
    scheduler, out = make_scheduler({"programa1": 1})
    job = scheduler.admit(JobSpec("programa1", 4, "numtickets="))
    assert len(job.tickets) == 4
    assert sorted(job.tickets) == sorted(scheduler.pool.assigned)
    assert len(scheduler.pool.available) == MAX_TICKETS - 4
    assert "Entrada de novo processo na fila\nNome: programa1\nPid: 100\nBilhetes: " in out.getvalue()


def test_step_without_jobs():
    scheduler, _ = make_scheduler({})
    assert scheduler.step() is None


def test_step_pauses_unfinished_job():
    scheduler, out = make_scheduler({"programa1": 2})
    job = scheduler.admit(JobSpec("programa1", 2))
    assert scheduler.step() is job
    assert job.status is JobStatus.READY
    assert job.process.signals == [signal.SIGCONT, signal.SIGSTOP]
    assert "Pausando - Programa programa1" in out.getvalue()


def test_step_finishes_job_and_releases_tickets():
    scheduler, out = make_scheduler({"programa1": 1})
    job = scheduler.admit(JobSpec("programa1", 3))
    scheduler.step()
    assert job.status is JobStatus.FINISHED
    assert job.tickets == []
    assert scheduler.pool.assigned == []
    assert sorted(scheduler.pool.available) == list(range(MAX_TICKETS))
    assert "Programa programa1 terminou sua execução..." in out.getvalue()


def test_run_completes_all_jobs():
    scheduler, out = make_scheduler({"programa1": 3, "programa2": 2})
    jobs = scheduler.run([JobSpec("programa1", 3), JobSpec("programa2", 2)])
    assert [job.status for job in jobs] == [JobStatus.FINISHED, JobStatus.FINISHED]
    text = out.getvalue()
    assert text.startswith(HEADER)
    assert text.count("terminou sua execução") == 2
    assert sorted(scheduler.pool.available) == list(range(MAX_TICKETS))


def test_run_kills_job_without_tickets():
    scheduler, _ = make_scheduler({"programa1": 1, "programa2": 5})
    jobs = scheduler.run([JobSpec("programa1", 1), JobSpec("programa2", 0)])
    assert jobs[1].status is JobStatus.FINISHED
    assert signal.SIGKILL in jobs[1].process.signals
    assert signal.SIGCONT not in jobs[1].process.signals


def test_admit_invalid_program_logs_and_raises():
    out = io.StringIO()
    scheduler = LotteryScheduler(out, rng=random.Random(0), slice_seconds=0, arrival_interval=0)
    with pytest.raises(InvalidProgramError):
        scheduler.admit(JobSpec("bogus", 2))
    assert "o programa bogus nao existe" in out.getvalue()
    assert scheduler.jobs == []


def test_main_missing_exec_file(tmp_path):
    assert main([str(tmp_path / "missing.txt"), str(tmp_path / "saida.txt")]) == 1


def test_main_invalid_program(tmp_path):
    exec_file = tmp_path / "exec.txt"
    exec_file.write_text("exec bogus numtickets= 2\n", encoding="utf-8")
    out_file = tmp_path / "saida.txt"
    assert main([str(exec_file), str(out_file)]) == 1
    text = out_file.read_text(encoding="utf-8")
    assert text.startswith(HEADER)
    assert "bogus nao existe" in text


def test_main_empty_exec_file(tmp_path):
    exec_file = tmp_path / "exec.txt"
    exec_file.write_text("", encoding="utf-8")
    out_file = tmp_path / "saida.txt"
    assert main([str(exec_file), str(out_file)]) == 0
    assert out_file.read_text(encoding="utf-8") == HEADER