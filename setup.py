# setup.py
from setuptools import setup, find_packages

setup(
    name="greed",
    version="0.1.0",
    description="Watch a value on a web page and get notified when it changes",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "soupsieve>=2.5",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
        "selenium>=4.10",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "greed=greed.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
