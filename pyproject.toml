[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "disksleuth"
version = "1.0.1"
description = "Disk space analyser core: filesystem scanning, size aggregation and usage analysis"
requires-python = ">=3.10"
keywords = ["disk", "storage", "analyzer", "filesystem", "ntfs", "mft", "icon"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Utilities",
]
dependencies = [
    "psutil",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
disksleuth-icon = "disksleuth.icon:main"

[tool.hatch.build.targets.wheel]
packages = ["disksleuth"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
