# -*- coding: utf-8 -*-
from setuptools import setup, find_packages
import sys
if sys.version_info < (3, 9):
    sys.exit('Sorry, Python < 3.9 is not supported.')

setup(
    name="promote-release",
    version="0.1.0",
    author="Rust Infrastructure Team",
    description="Promotes rustup releases from the build bucket to the distribution bucket",
    url="https://github.com/rust-lang/promote-release",
    license="MIT OR Apache-2.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp",
        "click",
        "opentelemetry-api",
        "tomli",
    ],
    extras_require={
        "tests": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "promote-release = promote_release.__main__:main",
        ],
    },
    dependency_links=[],
    python_requires='>=3.9',
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Environment :: Console",
        "Operating System :: POSIX",
        "License :: OSI Approved :: Apache Software License",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Build Tools",
        "Natural Language :: English",
    ]
)
