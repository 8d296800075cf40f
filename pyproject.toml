[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "volt"
version = "0.1.0"
description = "HTTP client and load tester with saved requests, latency statistics and terminal pane components"
requires-python = ">=3.10"
keywords = ["http", "load-testing", "benchmark", "http-client", "terminal", "latency"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Testing :: Traffic Generation",
    "Topic :: System :: Benchmark",
]
dependencies = [
    "requests",
    "pygments",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
volt = "volt.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["volt"]

[tool.pytest.ini_options]
addopts = "-ra"
