[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "jungle"
version = "0.1.0"
description = "Game-engine helpers: YAML resource manifests, text-to-texture rendering, demo geometry and a first-person camera controller"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
    "pillow",
]
keywords = ["game", "engine", "resources", "manifest", "text rendering", "camera"]
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
    "Topic :: Games/Entertainment",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["jungle"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
