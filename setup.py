"""
Setup configuration for TaskHub
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="taskhub",
    version="0.1.0",
    author="TaskHub Team",
    description="Multi-user task tracking over REST and WebSocket",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["taskhub_core", "taskhub_core.*", "taskhub_api", "taskhub_api.*",
                                    "taskhub_cli", "taskhub_cli.*"]),
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
    entry_points={
        "console_scripts": [
            "taskhub=taskhub_cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Framework :: FastAPI",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
