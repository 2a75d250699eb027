[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "loccorr"
version = "0.0.1"
description = "Camera frame processing for spot location: FITS I/O, median filtering, background estimation, binary erosion and connected-component labelling"
requires-python = ">=3.10"
keywords = [
    "astronomy",
    "fits",
    "image processing",
    "median filter",
    "morphology",
    "connected components",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Processing",
    "Topic :: Scientific/Engineering :: Astronomy",
]
dependencies = [
    "numpy",
    "pillow",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["loccorr"]

[tool.pytest.ini_options]
addopts = "-ra"
