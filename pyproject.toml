[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sfxprovider"
version = "0.1.0"
description = "Resource logic for keeping SignalFx charts, teams and integrations in step with declared state"
requires-python = ">=3.10"
dependencies = []
keywords = ["signalfx", "monitoring", "charts", "infrastructure-as-code", "observability"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sfxprovider"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
