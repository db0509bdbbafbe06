[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "inlet"
version = "0.1.0"
description = "Single-producer, multi-consumer ring buffer shared between processes through a memory-mapped file"
requires-python = ">=3.10"
dependencies = []
keywords = ["ipc", "ring-buffer", "mmap", "shared-memory", "producer-consumer", "messaging"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
inlet-example-producer = "inlet.example_producer:main"
inlet-example-consumer = "inlet.example_consumer:main"

[tool.hatch.build.targets.wheel]
packages = ["inlet"]

[tool.pytest.ini_options]
addopts = "-ra"
