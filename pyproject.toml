[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "modernapi"
version = "0.1.0"
description = "Fibonacci HTTP server and client, plus the building blocks of a books catalogue backend"
requires-python = ">=3.10"
keywords = ["fibonacci", "rest", "http", "books", "sqlalchemy", "json-logging", "migrations"]
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
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "Topic :: Database",
]
dependencies = [
    "pyyaml>=6.0",
    "sqlalchemy>=2.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
rest-fibonacci-server = "modernapi.rest_fibonacci_server:main"
rest-fibonacci-client = "modernapi.rest_fibonacci_client:main"

[tool.hatch.build.targets.wheel]
packages = ["modernapi"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
