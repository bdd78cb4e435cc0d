[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mtcompress"
version = "0.1.0"
description = "Multi-threaded Brotli and LZ4 compression using independent skippable frames"
requires-python = ">=3.10"
keywords = ["compression", "brotli", "lz4", "multithreading", "skippable frames"]
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
    "Topic :: System :: Archiving :: Compression",
]
dependencies = [
    "brotli",
    "lz4",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mtcompress"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
