#!/usr/bin/env python3
from setuptools import find_packages, setup

setup(
    name="countable-filter",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    license="MIT",
    description="Query filters with alternative (faceted) counts per filter parameter",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: MIT License",
        "Topic :: Database",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Intended Audience :: Developers",
    ],
    python_requires=">=3.10",
    install_requires=open("requirements/requirements.in").read().splitlines(),
    extras_require={
        "dev": open("requirements/dev_requirements.in").read().splitlines(),
        "test": open("requirements/test_requirements.in").read().splitlines(),
    },
    entry_points={"console_scripts": ["countable-filter=countable_filter.cli:main"]},
)
