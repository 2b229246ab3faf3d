[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "onec-tools"
version = "0.1.0"
description = "Tool definitions, handlers and Markdown formatters for working with a 1C:Enterprise infobase over its HTTP service"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "1c",
    "1c-enterprise",
    "bsl",
    "tools",
    "metadata",
    "query",
    "counterparties",
    "event-log",
    "markdown",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Natural Language :: Russian",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["onec_tools"]

[tool.hatch.build.targets.sdist]
include = ["onec_tools", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
