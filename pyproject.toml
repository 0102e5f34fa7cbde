[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mpbcore"
version = "1.12.0"
description = "Core data structures for plane-wave Maxwell eigenproblems: k+G bases, parity constraints and dielectric tensor averaging"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["photonics", "maxwell", "eigenmodes", "photonic crystals", "dielectric", "plane waves"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mpbcore"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"
