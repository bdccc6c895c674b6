[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gedsearch"
version = "0.1.0"
description = "Exact graph edit distance computation and verification with A* and depth-first branch-and-bound search"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "graph edit distance",
    "GED",
    "graph similarity",
    "A* search",
    "branch and bound",
    "Hungarian algorithm",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gedsearch = "gedsearch.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gedsearch"]

[tool.pytest.ini_options]
addopts = "-ra"
