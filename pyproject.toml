[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pdfcore"
version = "0.9.0"
description = "Low-level PDF object model, lexer, parser and cross-reference table handling"
requires-python = ">=3.10"
dependencies = []
keywords = ["pdf", "parser", "lexer", "xref", "cross-reference"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: File Formats",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pdfcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
