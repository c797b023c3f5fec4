[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "accessgate"
version = "0.1.0"
description = "Access control enforcement with configurable models: ACL, RBAC and pattern-matching policies"
requires-python = ">=3.10"
dependencies = []
keywords = ["access-control", "authorization", "acl", "rbac", "policy", "enforcer"]
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
    "Topic :: Security",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["accessgate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
