import os
import stat
import threading

import pytest

from syslabs import ipc


def _read_in_background(path):
    chunks = []
    thread = threading.Thread(target=lambda: chunks.extend(ipc.read_fifo(path)))
    thread.start()
    return thread, chunks


def test_pipe_message_delivers_source_text():
    assert ipc.pipe_message("Pai, feliz dia dos pais") == "Pai, feliz dia dos pais"


def test_pipe_message_round_trip_unicode():
    text = "mensagem com acentuação"
    assert ipc.pipe_message(text) == text


def test_scale_numbers_writes_lines(tmp_path):
    source = tmp_path / "entrada.txt"
    target = tmp_path / "saida.txt"
    source.write_text("1 2\n3\n")
    ipc.scale_numbers(source, target)
    assert target.read_text() == "Mult: 10\nMult: 20\nMult: 30\n"


def test_scale_numbers_stops_at_non_integer(tmp_path):
    source = tmp_path / "entrada.txt"
    source.write_text("4 5 x 6")
    products = ipc.scale_numbers(source, tmp_path / "saida.txt", 3)
    assert len(products) == 2


def test_scale_numbers_does_not_truncate(tmp_path):
    source = tmp_path / "entrada.txt"
    target = tmp_path / "saida.txt"
    source.write_text("1")
    target.write_text("#" * 50)
    ipc.scale_numbers(source, target)
    content = target.read_text()
    assert len(content) == 50
    assert content.endswith("#")


def test_scale_numbers_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        ipc.scale_numbers(tmp_path / "absent.txt", tmp_path / "out.txt")


def test_pipe_commands_passes_output_through():
    assert ipc.pipe_commands(["echo", "hello"], ["cat"]) == "hello\n"


def test_create_fifo_makes_working_fifo(tmp_path):
    path = tmp_path / "fifo"
    ipc.create_fifo(path)
    assert stat.S_ISFIFO(os.stat(path).st_mode) is True
    thread, chunks = _read_in_background(path)
    written = ipc.write_fifo(path, ["ola\n"], stop="fim")
    thread.join(timeout=10)
    assert written == 1
    assert "".join(chunks) == "ola"


def test_create_fifo_twice_fails(tmp_path):
    path = tmp_path / "fifo"
    ipc.create_fifo(path)
    with pytest.raises(FileExistsError):
        ipc.create_fifo(path)


def test_write_fifo_stops_at_stop_word(tmp_path):
    path = tmp_path / "fifo"
    ipc.create_fifo(path)
    thread, chunks = _read_in_background(path)
    written = ipc.write_fifo(path, ["abc\n", "PARA\n", "zzz\n"])
    thread.join(timeout=10)
    assert written == 1
    assert "".join(chunks) == "abc"


def test_write_fifo_strips_newlines(tmp_path):
    path = tmp_path / "fifo"
    ipc.create_fifo(path)
    thread, chunks = _read_in_background(path)
    ipc.write_fifo(path, ["ab\n", "cd\n"], stop="fim")
    thread.join(timeout=10)
    assert "".join(chunks) == "abcd"


def test_fifo_two_writers_reads_both_messages(tmp_path):
    messages = ipc.fifo_two_writers(tmp_path / "fifo2")
    assert sorted(messages) == ["PRIMEIRO FILHO", "SEGUNDO FILHO"]


def test_fifo_two_writers_existing_path(tmp_path):
    path = tmp_path / "fifo2"
    path.write_text("")
    with pytest.raises(FileExistsError):
        ipc.fifo_two_writers(path)


def test_main_unknown_command():
    assert ipc.main(["nothing"]) == 2