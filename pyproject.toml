[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvkern"
version = "0.1.0"
description = "Core pieces of a small x86 teaching kernel in Python: paging, descriptors, ELF headers, C string routines, a free-list heap, system-call argument checks, a shell parser, word counting and locks."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kernel",
    "operating-system",
    "paging",
    "x86",
    "elf",
    "shell",
    "malloc",
    "spinlock",
    "teaching",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xvkern-wc = "xvkern.wc:main"

[tool.hatch.build.targets.wheel]
packages = ["xvkern"]

[tool.hatch.build.targets.sdist]
include = ["xvkern", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
