[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kclasync"
version = "0.1.0"
description = "Asyncio record processor framework for the Kinesis Client Library MultiLang Daemon protocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["kinesis", "kcl", "multilang", "asyncio", "stream-processing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest", "pytest-asyncio"]

[project.scripts]
kclasync-example = "kclasync.example:main"
kcl-bootstrap = "kclasync.bootstrap.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["kclasync"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
