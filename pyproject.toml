[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shardnet"
version = "0.1.0"
description = "Shard-aware peer eviction, connection metrics and connection watchers for peer-to-peer nodes"
requires-python = ">=3.10"
dependencies = []
keywords = ["p2p", "sharding", "kademlia", "peers", "networking", "eviction"]
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
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["shardnet"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
