"""Setup configuration for ssrp-client."""

from setuptools import setup, find_packages

setup(
    name="ssrp-client",
    version="0.1.0",
    description="SQL Server Resolution Protocol (SSRP) discovery client",
    packages=find_packages(include=["ssrp", "ssrp.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ssrp=ssrp.cli:main",
        ],
    },
)
