[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kernsim"
version = "0.1.0"
description = "Python models of a small x86 teaching kernel: console, file system image reader, keyboard, PIC, paging, IDT and user-level helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "simulation", "filesystem", "paging", "interrupts", "emulator", "8259", "multiboot"]
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
    "Topic :: System :: Emulators",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kernsim"]

[tool.pytest.ini_options]
addopts = "-ra"
