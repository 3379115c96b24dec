[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "feedmeplease"
version = "1.0.0"
description = "Streams Binance spot and perpetual trade ticks and prints periodic price snapshots."
requires-python = ">=3.10"
keywords = ["market-data", "binance", "websocket", "ticks", "funding-rate", "crypto"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "websocket-client",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
feedmeplease = "feedmeplease.main:main"

[tool.hatch.build.targets.wheel]
packages = ["feedmeplease"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
