# setup.py
from setuptools import setup, find_packages

setup(
    name="gitbook2text",
    version="0.1.0",
    description="Асинхронный краулер GitBook и конвертер страниц в чистый текст",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "markdown-it-py>=3.0",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "gitbook2text=gitbook2text.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
