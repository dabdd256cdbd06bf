[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netbox_ip_controller"
version = "0.1.0"
description = "Building blocks for publishing Kubernetes pod and service IP addresses to NetBox IPAM"
requires-python = ">=3.10"
keywords = ["netbox", "ipam", "kubernetes", "ip-address", "rest-client"]
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
    "Topic :: System :: Networking",
    "Typing :: Typed",
]
dependencies = [
    "requests",
    "urllib3",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["netbox_ip_controller"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
