"""CPU- and I/O-bound workload programs run under the schedulers."""

from __future__ import annotations

import math
import struct
import sys
from dataclasses import dataclass
from typing import Callable, Iterator

_LOOP_MARK = "SAIU DE UM FOR...\n\n"


def _f32(value: float) -> float:
    """Round a value to single precision."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _int32(value: int) -> int:
    return (value + 2**31) % 2**32 - 2**31


def _cmod(a: int, b: int) -> int:
    """Remainder truncated toward zero."""
    remainder = abs(a) % abs(b)
    return -remainder if a < 0 else remainder


def _fdiv(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _tokens(path) -> Iterator[str]:
    with open(path, encoding="utf-8") as source:
        for line in source:
            yield from line.split()


def _leading_floats(path) -> Iterator[float]:
    """Single-precision numbers up to the first token that is not one."""
    for token in _tokens(path):
        try:
            yield _f32(float(token))
        except ValueError:
            return


def program1(outer=5000, inner=50000) -> float:
    """Sum of (j - i) over a nested loop."""
    k = 0.0
    for i in range(outer):
        for j in range(inner):
            k += float(j - i)
    return k


def program2(outer=5000, inner=5000) -> float:
    """Product of (j + i + 1) over a nested loop."""
    k = 1.0
    for i in range(outer):
        for j in range(inner):
            k *= float(j + i + 1)
    return k


def program3(in_path="testeprog3.txt") -> tuple[float, float]:
    """Fold the integers of a file into two single-precision accumulators."""
    first, second = 0.0, -3.0
    scale_up, scale_down = _f32(5.3), _f32(5.9)
    for token in _tokens(in_path):
        current = int(token)
        current = _int32(current + _int32(current * _cmod(current, 11)))
        current = _int32(current + current * 2)
        first = _f32(first - _f32(float(current)))
        second = _f32(second + _f32(first * float(_cmod(current, 7))))
        first = _f32(first * _f32(_f32(2.0 * first) / 3.0))
        second = _f32(_fdiv(second, _f32(_f32(scale_up * first) / scale_down)))
    return first, second


def program4(in_path="testeprog4.txt", out_path="saidaprog4.txt") -> list[float]:
    """Write each number of the input times -2.75, one per line."""
    factor = _f32(-2.75)
    values = [_f32(_f32(float(token)) * factor) for token in _tokens(in_path)]
    with open(out_path, "w", encoding="utf-8") as target:
        target.writelines(f"{value:.6f}\n" for value in values)
    return values


def program5(out_path="saidaprog5.txt", lines=6000, words=5000) -> None:
    """Write a large block of fixed text."""
    row = "Saida\t" * words + "SAIDA...\n"
    with open(out_path, "w", encoding="utf-8") as target:
        for _ in range(lines):
            target.write(row)


def program6(in_path="testeprog6.txt", out_path="saidaprog6.txt", outer=5000, inner=500) -> int:
    """Repeat every input number many times in the output; return how many were read."""
    count = 0
    with open(in_path, encoding="utf-8"), open(out_path, "w", encoding="utf-8") as target:
        for value in _leading_floats(in_path):
            block = f"{value:.2f} " * inner + _LOOP_MARK
            for _ in range(outer):
                target.write(block)
            count += 1
    return count


def program7(in_path="testeprog7.txt", out_path="saidaprog7.txt", repeats=5000000) -> float:
    """Accumulate each input number repeatedly, writing every partial sum."""
    total = 1.0
    with open(in_path, encoding="utf-8"), open(out_path, "w", encoding="utf-8") as target:
        for value in _leading_floats(in_path):
            for _ in range(repeats):
                total += value
                target.write(f"{total:.2f} ")
            target.write(_LOOP_MARK)
    return total


@dataclass(frozen=True)
class _Command:
    run: Callable[[], object]
    source: str | None = None
    source_label: str | None = None
    target: str | None = None


_COMMANDS = {
    "1": _Command(program1),
    "2": _Command(program2),
    "3": _Command(program3, "testeprog3.txt", "testeprog3.txt"),
    "4": _Command(program4, "testeprog4.txt", "testeprog3.txt", "saidaprog4.txt"),
    "5": _Command(program5, None, None, "saidaprog5.txt"),
    "6": _Command(program6, "testeprog6.txt", "testeprog6.txt", "saidaprog6.txt"),
    "7": _Command(program7, "testeprog7.txt", "testeprog7.txt", "saidaprog7.txt"),
}


def main(argv=None) -> int:
    """Run workload number 1 to 7 with its default files."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 1 or args[0] not in _COMMANDS:
        print("uso: workloads N   (N de 1 a 7)", file=sys.stderr)
        return 2
    command = _COMMANDS[args[0]]
    try:
        command.run()
    except OSError as exc:
        if command.source is not None and exc.filename == command.source:
            print(f"\nArquivo {command.source_label} nao pode ser aberto para leitura.")
        else:
            print(f"\nArquivo {command.target} nao pode ser aberto para escrita.")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())