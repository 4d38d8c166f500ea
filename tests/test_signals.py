import os
import sys

import pytest

from syslabs.signals import (
    CallMeter,
    alternate_children,
    arithmetic_report,
    call_cost_cents,
    format_call,
    io_bound,
    rotate_programs,
    time_limit,
)


def test_call_cost_first_minute_is_double_rate():
    assert call_cost_cents(0) == 0
    assert call_cost_cents(60) == call_cost_cents(30) * 2


def test_call_cost_after_first_minute_adds_one_cent_per_second():
    assert call_cost_cents(61) - call_cost_cents(60) == 1
    assert call_cost_cents(200) - call_cost_cents(100) == 100


def test_call_cost_rejects_negative():
    with pytest.raises(ValueError):
        call_cost_cents(-1)


def test_format_call_worked_example():
    assert format_call(75) == (
        "Chamada terminada. Duracao: 1 m 15 s \nCusto ligacao: R$1,35"
    )


def test_format_call_pads_cents_to_two_digits():
    cost_line = format_call(3).splitlines()[1]
    assert cost_line.startswith("Custo ligacao: R$0,")
    assert len(cost_line.split(",")[1]) == 2


def test_call_meter_measures_elapsed(capsys):
    times = iter([100.0, 175.0])
    meter = CallMeter(clock=lambda: next(times))
    meter.call_received()
    assert meter.call_ended() == 175 - 100
    out = capsys.readouterr().out
    assert out == "Chamada recebida!\n" + format_call(75) + "\n"


def test_call_meter_without_call():
    with pytest.raises(RuntimeError):
        CallMeter(clock=lambda: 0.0).call_ended()


def test_arithmetic_report_example():
    assert list(arithmetic_report(7, 2)) == [
        "Soma 9",
        "Diferenca 5",
        "Multiplicacao: 14",
        "Divisao: 3",
    ]


def test_division_truncates_toward_zero():
    assert list(arithmetic_report(-7, 2))[-1] == "Divisao: -3"


def test_division_by_zero_after_other_lines():
    report = arithmetic_report(4, 0)
    lines = [next(report) for _ in range(3)]
    assert [line.split()[0] for line in lines] == ["Soma", "Diferenca", "Multiplicacao:"]
    with pytest.raises(ZeroDivisionError, match="Divisão nao pode ser feita por 0!"):
        next(report)


def test_io_bound_prints_label(capsys):
    assert io_bound(2, 3) == 3
    assert capsys.readouterr().out == "IO Bound 2\n" * 3


def test_io_bound_zero_count(capsys):
    assert io_bound(1, 0) == 0
    assert capsys.readouterr().out == ""


def test_time_limit_returns_exit_code(capsys):
    status = time_limit([sys.executable, "-c", "raise SystemExit(4)"], 30)
    assert status == 4
    assert "terminated within" in capsys.readouterr().out


def test_time_limit_kills_slow_program(capsys):
    command = [sys.executable, "-c", "import time; time.sleep(30)"]
    assert time_limit(command, 0.3) is None
    assert "exceeded limit of 0.3 seconds!" in capsys.readouterr().out


def test_alternate_children_kills_and_reaps(capsys):
    pids = alternate_children(1, 0.01)
    assert len(set(pids)) == 2
    for pid in pids:
        with pytest.raises(ChildProcessError):
            os.waitpid(pid, 0)
    assert capsys.readouterr().out.endswith("Terminando execucao.\n")


def test_rotate_programs_runs_until_all_exit():
    commands = [
        [sys.executable, "-c", "pass"],
        [sys.executable, "-c", "raise SystemExit(2)"],
    ]
    assert rotate_programs(commands, [0.05, 0.05]) == [0, 2]


def test_rotate_programs_needs_one_slice_per_command():
    with pytest.raises(ValueError):
        rotate_programs([[sys.executable, "-c", "pass"]], [1, 2])