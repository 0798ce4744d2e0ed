# setup.py
from setuptools import setup, find_packages

setup(
    name="fetch_window",
    version="0.1.0",
    description="Bounded-concurrency resource fetcher FetchWindow",
    packages=find_packages(include=["fetch_window", "fetch_window.*"]),
    package_data={"fetch_window": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "fetch-window=fetch_window.cli:main",
        ],
    },
    python_requires=">=3.11",
)
