[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "polychain"
version = "0.1.0"
description = "Address codecs, ABI and RLP encoding, transaction building and gas estimation for EVM chains and Filecoin, plus DigiByte and Dogecoin network parameters"
requires-python = ">=3.10"
keywords = [
    "blockchain",
    "ethereum",
    "evm",
    "eip-1559",
    "filecoin",
    "abi",
    "rlp",
    "secp256k1",
    "dogecoin",
    "digibyte",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Office/Business :: Financial",
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pycryptodome",
    "requests",
    "cbor2",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[tool.hatch.build.targets.wheel]
packages = ["polychain"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
