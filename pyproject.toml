[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "safethrough"
version = "1.0.0"
description = "Client toolkit for a secure file-sharing service: binary transfer packets, a TCP file client, command parsing and one-time authorisation codes"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "file-transfer",
    "file-sharing",
    "xmpp",
    "protocol",
    "authentication",
    "single-sign-on",
]
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
    "Topic :: Communications :: File Sharing",
    "Topic :: Internet :: XMPP",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["safethrough"]

[tool.hatch.build.targets.sdist]
include = ["safethrough", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"
