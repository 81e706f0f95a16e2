"""Setup script for redcap-client."""

from setuptools import find_packages, setup

setup(
    name="redcap-client",
    version="1.0.0",
    description="Client for the REDCap API with batched record export",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click>=8.1.7",
        "rich>=13.7.0",
        "requests>=2.31.0",
        "urllib3>=2.1.0",
        "python-dotenv>=1.0.0",
        "structlog>=24.1.0",
        "pyyaml>=6.0.1",
        "pydantic>=2.5.0",
        "pydantic-settings>=2.1.0",
        "tenacity>=8.2.3",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "responses>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "redcap-client=redcap_client.cli.main:main",
        ],
    },
)
