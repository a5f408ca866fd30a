[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "salesanalytics"
version = "0.1.0"
description = "Load sales CSV exports into a relational database and serve top-product reports over HTTP."
requires-python = ">=3.11"
keywords = ["sales", "analytics", "csv", "reporting", "http-api"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]
dependencies = [
    "sqlalchemy>=2.0",
    "flask>=2.3",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
]

[project.scripts]
salesanalytics = "salesanalytics.app:main"

[tool.hatch.build.targets.wheel]
packages = ["salesanalytics"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]
