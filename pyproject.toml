[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hidgatt"
version = "0.1.0"
description = "Bluetooth Low Energy codecs for HCI, L2CAP, ATT and SMP packets, HCI events, a minimal GATT attribute database and LE legacy pairing security functions."
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = [
    "bluetooth",
    "ble",
    "hci",
    "gatt",
    "l2cap",
    "att",
    "smp",
    "pairing",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["hidgatt"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
