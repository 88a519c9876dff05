[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "minidb"
version = "0.1.0"
description = "Network front end, query structures and interactive client for a small teaching database"
requires-python = ">=3.10"
dependencies = []
keywords = ["database", "sql", "server", "client", "teaching"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
minidb-client = "minidb.client:main"
minidb-server = "minidb.server:main"

[tool.hatch.build.targets.wheel]
packages = ["minidb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
