import math

import pytest

from syslabs.workloads import (
    main,
    program1,
    program2,
    program3,
    program4,
    program5,
    program6,
    program7,
)


def test_program1_small():
    assert program1(2, 3) == 3.0


def test_program1_empty_loop_keeps_start():
    assert program1(0, 10) == 0.0


def test_program2_small():
    assert program2(1, 3) == 6.0


def test_program2_overflows_to_infinity():
    assert program2(50, 50) == math.inf


def test_program3_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        program3(tmp_path / "none.txt")


def test_program3_zero_divides_to_negative_infinity(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("0\n")
    first, second = program3(source)
    assert first == 0.0
    assert math.isinf(second) and second < 0


def test_program3_ignores_layout(tmp_path):
    a = tmp_path / "a.txt"
    b = tmp_path / "b.txt"
    a.write_text("1 2 3")
    b.write_text("1\n2\n\n3\n")
    assert program3(a) == program3(b)


def test_program3_rejects_non_integer(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("1 abc")
    with pytest.raises(ValueError):
        program3(source)


def test_program4_scales(tmp_path):
    source = tmp_path / "in.txt"
    target = tmp_path / "out.txt"
    source.write_text("1\n")
    assert program4(source, target) == [-2.75]
    assert target.read_text() == "-2.750000\n"


def test_program4_output_matches_values(tmp_path):
    source = tmp_path / "in.txt"
    target = tmp_path / "out.txt"
    source.write_text("3.5 -4 10 0.25\n")
    values = program4(source, target)
    written = [float(line) for line in target.read_text().splitlines()]
    assert written == pytest.approx(values, abs=1e-6)
    assert len(written) == 4


def test_program5_content(tmp_path):
    target = tmp_path / "out.txt"
    program5(target, lines=2, words=3)
    assert target.read_text() == ("Saida\t" * 3 + "SAIDA...\n") * 2


def test_program5_no_lines(tmp_path):
    target = tmp_path / "out.txt"
    program5(target, lines=0, words=3)
    assert target.read_text() == ""


def test_program6_content(tmp_path):
    source = tmp_path / "in.txt"
    target = tmp_path / "out.txt"
    source.write_text("1.5\n")
    assert program6(source, target, outer=2, inner=2) == 1
    assert target.read_text() == ("1.50 " * 2 + "SAIU DE UM FOR...\n\n") * 2


def test_program6_stops_at_non_number(tmp_path):
    source = tmp_path / "in.txt"
    target = tmp_path / "out.txt"
    source.write_text("2 x 3\n")
    assert program6(source, target, outer=1, inner=1) == 1
    assert target.read_text().count("SAIU DE UM FOR") == 1


def test_program7_last_sum_is_returned(tmp_path):
    source = tmp_path / "in.txt"
    target = tmp_path / "out.txt"
    source.write_text("0.5 2\n")
    total = program7(source, target, repeats=3)
    content = target.read_text()
    sums = [float(tok) for tok in content.split() if tok[0].isdigit()]
    assert sums[-1] == pytest.approx(total)
    assert sums == sorted(sums)
    assert content.count("SAIU DE UM FOR...") == 2


def test_main_missing_input(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["3"]) == 1
    assert "Arquivo testeprog3.txt nao pode ser aberto para leitura." in capsys.readouterr().out


def test_main_program4_message(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["4"]) == 1
    assert "testeprog3.txt nao pode ser aberto para leitura." in capsys.readouterr().out


def test_main_unknown_program():
    assert main(["8"]) == 2
    assert main([]) == 2