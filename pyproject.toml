[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pktperf"
version = "1.6.0.dev0"
description = "Configuration, packet building and protocol helpers for a stateful network load generator"
requires-python = ">=3.10"
dependencies = []
keywords = ["networking", "benchmark", "load-generator", "tcp", "http", "arp", "checksum"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
    "Topic :: System :: Benchmark",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pktperf = "pktperf.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pktperf"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
