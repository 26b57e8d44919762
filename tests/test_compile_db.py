import pytest

from loopprobe.compile_db import PRECOMPILE_FLAGS, PreCompileInfo, parse_compile_commands

SINGLE = """[
  {
    "arguments": [
      "gcc",
      "-c",
      "-Wall",
      "-o",
      "main.o",
      "main.c"
    ],
    "directory": "/home/user/project",
    "file": "main.c"
  }
]
"""

DOUBLE = """[
  {
    "arguments": [
      "gcc",
      "-c",
      "-o",
      "a.o",
      "a.c"
    ],
    "directory": "/work/one",
    "file": "a.c"
  },
  {
    "arguments": [
      "g++",
      "-c",
      "-DNAME=value",
      "-o",
      "src/util.o",
      "src/util.cpp"
    ],
    "directory": "/work/two",
    "file": "src/util.cpp"
  }
]
"""


@pytest.fixture(autouse=True)
def _workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def _write(tmp_path, text, name="compile_commands.json"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_single_entry_command(tmp_path):
    infos = parse_compile_commands(_write(tmp_path, SINGLE))
    assert len(infos) == 1
    assert infos[0].command == " gcc -E -P -Wall main.c -o main.E.c"


def test_single_entry_directory_and_file(tmp_path):
    (info,) = parse_compile_commands(_write(tmp_path, SINGLE))
    assert info.dir_path == "/home/user/project"
    assert info.file_name == "main.c"


def test_output_argument_is_dropped(tmp_path):
    (info,) = parse_compile_commands(_write(tmp_path, SINGLE))
    assert "main.o" not in info.command
    assert "-c" not in info.command.split()
    assert PRECOMPILE_FLAGS in info.command


def test_entries_keep_their_order(tmp_path):
    infos = parse_compile_commands(_write(tmp_path, DOUBLE))
    assert [info.file_name for info in infos] == ["a.c", "src/util.cpp"]
    assert [info.dir_path for info in infos] == ["/work/one", "/work/two"]


def test_output_name_keeps_extension_after_last_dot(tmp_path):
    infos = parse_compile_commands(_write(tmp_path, DOUBLE))
    assert infos[1].command.endswith(" -o src/util.E.cpp")


def test_quotes_and_commas_are_removed(tmp_path):
    infos = parse_compile_commands(_write(tmp_path, DOUBLE))
    tokens = infos[1].command.split()
    assert "-DNAME=value" in tokens
    assert all('"' not in token and "," not in token for token in tokens)


def test_every_entry_starts_with_compiler(tmp_path):
    infos = parse_compile_commands(_write(tmp_path, DOUBLE))
    assert [info.command.split()[0] for info in infos] == ["gcc", "g++"]


def test_empty_database(tmp_path):
    assert parse_compile_commands(_write(tmp_path, "[]\n")) == []


def test_missing_database_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_compile_commands(tmp_path / "absent.json")


def test_directory_before_arguments_raises(tmp_path):
    text = '[\n  {\n    "directory": "/x",\n    "file": "a.c"\n  }\n]\n'
    with pytest.raises(ValueError):
        parse_compile_commands(_write(tmp_path, text))


def test_info_defaults_are_empty():
    info = PreCompileInfo()
    assert (info.dir_path, info.command, info.file_name) == ("", "", "")