[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "steppipe"
version = "0.1.0"
description = "Sensor measurement pipeline: typed measurement headers, filter chains, processor nodes and a priority-ordered processing manager"
requires-python = ">=3.10"
keywords = ["sensor", "measurement", "pipeline", "filter", "SI units", "data processing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
steppipe-demo = "steppipe.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["steppipe"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
