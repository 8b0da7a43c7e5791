[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gotodir"
version = "0.1.0"
description = "Directory navigator: index workspaces, rank directories by match, recency and frequency, jump with a query"
requires-python = ">=3.11"
dependencies = [
    "platformdirs",
]
keywords = ["cd", "directory", "navigation", "shell", "jump", "bookmarks"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Shells",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
goto = "gotodir.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gotodir"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
