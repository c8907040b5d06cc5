[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "planefx"
version = "0.1.0"
description = "Plane-level video filters on numpy arrays: watershed amplitude, Gaussian blur, step noise removal, colour boxes and interpolation helpers"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["video", "filter", "watershed", "blur", "interpolation", "image-processing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Video",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["planefx*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
