[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pulleys"
version = "0.1.0"
description = "Culture beacons for LED travelers and stations: packet format, culture blending, proximity zones and light patterns"
requires-python = ">=3.10"
dependencies = []
keywords = ["ble", "beacon", "led", "culture", "proximity", "art", "installation"]
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
    "Topic :: Artistic Software",
    "Topic :: Multimedia :: Graphics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["pulleys"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
