[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "loopprobe"
version = "0.1.0"
description = "Instrument C and C++ sources with loop iteration counters via srcML, and pre-compile translation units from a compilation database"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "instrumentation",
    "srcml",
    "loops",
    "profiling",
    "compile-commands",
    "preprocessor",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
loopprobe-instrument = "loopprobe.pipeline:main"
loopprobe-precompile = "loopprobe.precompile:main"

[tool.hatch.build.targets.wheel]
packages = ["loopprobe"]

[tool.hatch.build.targets.sdist]
include = ["loopprobe", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
