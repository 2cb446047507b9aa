[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gomek"
version = "0.1.0"
description = "A small WSGI web framework with chained route registration, resources, templates and middleware"
requires-python = ">=3.10"
keywords = ["wsgi", "web", "framework", "routing", "middleware", "templates"]
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
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "werkzeug",
    "jinja2",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gomek"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
