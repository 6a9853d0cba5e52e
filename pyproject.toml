[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shuflr"
version = "0.1.1"
description = "Deterministic, seedable shuffling and sampling of newline-delimited record streams such as JSONL."
requires-python = ">=3.10"
dependencies = []
keywords = ["jsonl", "ndjson", "shuffle", "sampling", "reservoir", "dataset", "entropy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Text Processing :: Filters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["shuflr"]

[tool.hatch.build.targets.sdist]
include = ["shuflr", "tests", "README.md"]

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
