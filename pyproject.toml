[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "queqiao"
version = "0.1.0"
description = "A JSON document model with a comment-preserving reader and writers, plus configuration loading and modular arithmetic helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["json", "comments", "configuration", "modular-arithmetic", "fixed-point"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["queqiao"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
