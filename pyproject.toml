[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "asnber"
version = "0.1.0"
description = "BER/DER tag-length-value handling and CHOICE, SEQUENCE and SEQUENCE OF codecs for ASN.1 types"
requires-python = ">=3.10"
dependencies = []
keywords = ["asn1", "ber", "der", "tlv", "codec", "xer"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["asnber"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
