[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ossporter"
version = "0.1.0"
description = "Extract projects from internal Git repositories into clean public repositories and keep them in sync."
requires-python = ">=3.11"
keywords = ["git", "repository", "open-source", "sync", "extract"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
    "Topic :: Utilities",
]
dependencies = [
    "tomli-w>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
oss-porter = "ossporter.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ossporter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
