from setuptools import setup, find_packages

setup(
    name="commandcast",
    version="1.0.0",
    description="Run a command on multiple hosts over SSH",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "asyncssh>=2.14.0",
        "aiofiles>=23.1.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "commandcast=commandcast.cli:main",
        ],
    },
)
