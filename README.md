# loopprobe

loopprobe prepares a C or C++ code base for measuring how often its loops
run. It has two command-line tools:

- **`loopprobe-instrument`** rewrites every loop in every function of a
  source tree so that the program counts its iterations and reports them
  when each loop finishes.
- **`loopprobe-precompile`** runs the preprocessor over each translation
  unit listed in a compilation database (`compile_commands.json`), so the
  expanded sources can be analysed.

Both tools run external programs: `loopprobe-instrument` needs `srcml` on
the `PATH`, and `loopprobe-precompile` needs `sh` and the compilers named in
the compilation database.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Configuration

Both tools read their settings from `../input.conf`, relative to the
directory they are started in, unless a settings file is given as the first
argument. The file holds `key=value` lines; leading blanks are ignored,
lines starting with `#` are comments, lines with more or fewer than one `=`
are skipped, and keys are matched without regard to case. The first
matching line wins.

```
# source tree to instrument
srcPath=/home/user/projects/myprog

# compilation database to pre-compile
JsonPath=/home/user/projects/myprog/build/compile_commands.json
```

Both tools exit with status 1 when the settings file cannot be read or the
key they need is missing.

## Instrumenting loops

```
loopprobe-instrument [settings-file]
```

The run takes the program name from the last component of `srcPath`
(`myprog` above) and works in the current directory:

1. Every `.c`, `.cc`, `.cpp`, `.cxx` and `.c++` file under `srcPath` is
   converted to srcML in `temp_myprog/`, keeping the directory layout.
   Every other file is copied into `myprog/`. Hidden files and directories
   are skipped and symbolic links are not followed. Up to ten conversions
   run at the same time, and progress is printed as
   `convert src file <path>(n/total)`.
2. Each XML document gets `#include <insertFile.h>`, and each loop body
   (`for`, `while`, `do`) inside a function definition, including those
   inside `extern` blocks, is instrumented: a counter `int countN=0;` is
   opened before the loop, `countN++;` is added at the end of the body
   (braces are added around bodies that had none), and after the loop a
   call `insert_count("<file>.txt", "<source path>", "<function>", N, countN);`
   hands the count on. Counters are numbered per function, inner loops
   first. Empty loop bodies are left alone. Documents of `resolveip.c` are
   not changed.
3. The XML documents are converted back to source code in `myprog/`.
4. `temp_myprog/` is removed.

Messages about failures are printed in colour and appended to
`errorInfo.log` in the current directory.

The stages are also available from Python:

```python
from loopprobe.pipeline import Instrumenter

job = Instrumenter("/home/user/projects/myprog")
job.build_src_to_xml()
job.build_insert_xml()
job.build_xml_to_src()
job.clear_tmp()
```

Each stage returns whether all of its files were handled. A single srcML
file named `temp_<source>.xml` can be instrumented in place with
`loopprobe.instrument.insert_code(path)`; it raises `ValueError` when the
document cannot be parsed.

## Pre-compiling a compilation database

```
loopprobe-precompile [settings-file]
```

For each entry of the database named by `JsonPath`, the compile command is
rewritten: `-c` becomes `-E -P`, the original `-o` output is dropped, and
the output is sent to `<stem>.E<ext>` (`main.c` becomes `main.E.c`). Each
command is written to a script `build_PreCompile<N>.sh` in the current
directory that changes into the entry's directory first, and the scripts
are run with `sh`, up to ten at a time. Progress is printed as
`PreCompile file: <dir>/<file>...(n/total)`.

From Python:

```python
from loopprobe.compile_db import parse_compile_commands
from loopprobe.precompile import exec_precompile

infos = parse_compile_commands("build/compile_commands.json")
exec_precompile(infos)
```

`parse_compile_commands` returns a list of `PreCompileInfo` records
(`dir_path`, `command`, `file_name`).

## Helpers

`loopprobe.strops` holds the small string routines used throughout, such as
`cut_by_label`, which splits a line on a separator while skipping empty
fields and limiting the number of parts, and `strip_leading_blanks`.
`loopprobe.settings.read_setting(path, key)` reads one value from a
settings file in the format shown above.

## What it does not do

- It does not supply `insertFile.h` or the `insert_count` function that the
  instrumented code calls; you provide them when building the
  instrumented program.
- It does not parse JSON in general: the compilation database is read line
  by line and must use the usual one-value-per-line layout.
- A failing compiler inside a pre-compile script is not reported; only a
  shell that cannot be started counts as a failure.