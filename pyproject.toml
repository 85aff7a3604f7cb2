[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minitcp"
version = "0.1.0"
description = "A small non-blocking, poll-driven TCP server and client with callbacks"
requires-python = ">=3.10"
dependencies = []
keywords = ["tcp", "socket", "select", "non-blocking", "networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["minitcp"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
