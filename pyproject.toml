[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "subsvc"
version = "1.0.0"
description = "HTTP service for recording user subscriptions and summing their cost"
requires-python = ">=3.10"
keywords = ["subscriptions", "rest", "api", "flask", "sqlalchemy"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask>=2.3",
    "sqlalchemy>=2.0",
    "pydantic>=2.0",
    "pyyaml>=6.0",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = ["pytest>=7.0"]

[project.scripts]
subsvc = "subsvc.app:main"

[tool.hatch.build.targets.wheel]
packages = ["subsvc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
