[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "skykv"
version = "0.1.0"
description = "An in-memory key/value table with query actions, all-or-nothing multi-key actions, server configuration parsing and a worker pool"
requires-python = ">=3.11"
dependencies = []
keywords = ["key-value", "database", "nosql", "in-memory", "configuration", "thread-pool"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Database Engines/Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["skykv"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
