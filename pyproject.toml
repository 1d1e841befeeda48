[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "penplot"
version = "0.1.0"
description = "Path filters, motion planning and command spooling for pen plotters"
requires-python = ">=3.10"
dependencies = []
keywords = ["plotter", "pen-plotter", "axidraw", "corexy", "motion-planning", "paths", "generative-art"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["penplot"]

[tool.pytest.ini_options]
addopts = "-ra"
