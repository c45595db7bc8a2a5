from __future__ import annotations

import re
from pathlib import Path

from setuptools import find_packages, setup


def read_version() -> str:
    init_py = Path(__file__).parent / "decipher_engine" / "__init__.py"
    text = init_py.read_text(encoding="utf-8")
    match = re.search(r"^__version__\s*=\s*\"([^\"]+)\"\s*$", text, re.M)
    if not match:
        raise RuntimeError("Unable to find __version__ in decipher_engine/__init__.py")
    return match.group(1)


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="decipher-engine",
    version=read_version(),
    description="Heuristic JavaScript deobfuscation rules and challenge scoring engine",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["decipher_engine", "decipher_engine.*"]),
    package_data={"decipher_engine": ["samples/*.js"]},
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Software Development :: Code Generators",
    ],
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "decipher=decipher_engine.cli:main",
        ],
    },
    install_requires=[
        "psutil",
        "requests",
    ],
    extras_require={
        "dev": ["pytest", "ruff"],
    },
)
