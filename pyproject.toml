[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syslabs"
version = "0.1.0"
description = "Operating-systems exercises: a virtual memory simulator, lottery and priority schedulers, workload programs, and process, signal, IPC and threading demonstrations"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating systems",
    "virtual memory",
    "page replacement",
    "scheduler",
    "lottery scheduling",
    "signals",
    "ipc",
    "fifo",
    "threads",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
syslabs-vmsim = "syslabs.vmsim:main"
syslabs-workload = "syslabs.workloads:main"
syslabs-lottery = "syslabs.lottery:main"
syslabs-priority = "syslabs.priority:main"
syslabs-processes = "syslabs.processes:main"
syslabs-signals = "syslabs.signals:main"
syslabs-ipc = "syslabs.ipc:main"
syslabs-sync = "syslabs.sync:main"

[tool.hatch.build.targets.wheel]
packages = ["syslabs"]

[tool.hatch.build.targets.sdist]
include = ["syslabs", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
