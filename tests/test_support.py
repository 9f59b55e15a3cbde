import os

import pytest

from kernsim.support import (
    DirectoryListing,
    SyscallNumber,
    execute,
    getargs,
    parse_command,
    strcmp,
    strncmp,
)


def test_strcmp_equal_and_order():
    assert strcmp("shell", "shell") == 0
    assert strcmp("a", "b") < 0
    assert strcmp("b", "a") > 0
    assert strcmp("abc", "ab") == ord("c")


def test_strcmp_is_unsigned():
    assert strcmp(b"\xff", b"a") > 0


def test_strncmp():
    assert strncmp("abcd", "abce", 3) == 0
    assert strncmp("abcd", "abce", 4) < 0
    assert strncmp("x", "y", 0) == 0
    assert strncmp("ab", "ab", 10) == 0


def test_parse_command_basic():
    assert parse_command("ls -l  foo") == ["./ls", "-l", "foo"]


def test_parse_command_trailing_newline():
    assert parse_command("cat\n") == ["./cat"]
    assert parse_command("prog \n x") == ["./prog"]


def test_parse_command_newline_after_argument_continues():
    assert parse_command("prog a\nb") == ["./prog", "a", "b"]


def test_parse_command_bytes_and_nul():
    assert parse_command(b"grep x\0ignored") == ["./grep", "x"]


def test_parse_command_too_long():
    with pytest.raises(ValueError):
        parse_command("a" * 1024)
    assert parse_command("a" * 1023)[0] == "./" + "a" * 1023


def _script(tmp_path, name, body):
    path = tmp_path / name
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(0o755)


def test_execute_returns_exit_status(tmp_path, monkeypatch):
    _script(tmp_path, "argc", "exit $#")
    monkeypatch.chdir(tmp_path)
    assert execute("argc a b c") == 3


def test_execute_killed_by_sigkill(tmp_path, monkeypatch):
    _script(tmp_path, "die", "kill -9 $$")
    monkeypatch.chdir(tmp_path)
    assert execute("die") == -1


def test_execute_killed_by_other_signal(tmp_path, monkeypatch):
    _script(tmp_path, "term", "kill -TERM $$")
    monkeypatch.chdir(tmp_path)
    assert execute("term") == 256


def test_execute_missing_program(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(OSError):
        execute("nothing_here")


def test_getargs():
    assert getargs(["prog", "a", "bc"], 5) == "a bc"
    assert getargs(["prog"], 1) == ""
    with pytest.raises(ValueError):
        getargs(["prog", "a", "bc"], 4)
    with pytest.raises(ValueError):
        getargs(["prog"], 0)


def test_syscall_number_lookup():
    assert SyscallNumber(SyscallNumber.READ.value) is SyscallNumber.READ
    assert len(set(SyscallNumber)) == len(list(SyscallNumber))


def test_directory_listing_reads_all_names(tmp_path):
    (tmp_path / "hello.txt").write_text("x")
    names = []
    with DirectoryListing(tmp_path) as listing:
        while True:
            chunk = listing.read(32)
            if not chunk:
                break
            assert len(chunk) == 32
            names.append(chunk.rstrip(b"\0"))
    assert set(names) == {b".", b"..", b"hello.txt"}


def test_directory_listing_truncates(tmp_path):
    listing = DirectoryListing(tmp_path)
    assert listing.read(1) == b"."
    long_name = "n" * 40
    (tmp_path / long_name).write_text("")
    listing.close()
    with DirectoryListing(tmp_path) as again:
        chunks = [again.read(100) for _ in range(3)]
    assert os.fsencode(long_name)[:32] in chunks


def test_directory_listing_closed_and_bad_size(tmp_path):
    listing = DirectoryListing(tmp_path)
    with pytest.raises(ValueError):
        listing.read(0)
    listing.close()
    with pytest.raises(ValueError):
        listing.read(32)