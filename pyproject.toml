[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "payd"
version = "0.1.0"
description = "Payment wallet services: invoices, payment destinations, payment requests and outgoing payments."
requires-python = ">=3.10"
keywords = ["payments", "wallet", "invoices", "bip32", "dpp", "spv", "merkle-proof"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]
dependencies = [
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["payd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
