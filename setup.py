# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Avalon Collector contributors

"""Setup configuration for the avalon-collector package."""

from pathlib import Path

from setuptools import find_packages, setup

# Read the README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="avalon-collector",
    version="0.1.0",
    author="Avalon Collector Contributors",
    description="Error ingestion service with webhook and real-time WebSocket notifications",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(
        include=[
            "avalon_auth", "avalon_auth.*",
            "avalon_collector", "avalon_collector.*",
            "avalon_config", "avalon_config.*",
            "avalon_logging", "avalon_logging.*",
            "avalon_metrics", "avalon_metrics.*",
            "avalon_storage", "avalon_storage.*",
        ],
    ),
    package_data={"avalon_config": ["schemas/*.json"]},
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.109.0",  # For the HTTP and WebSocket surface
        "starlette>=0.49.1",  # For threadpool offloading and exception types
        "uvicorn>=0.27.0",  # For serving the application
        "pydantic>=2.4.0",  # For request validation
        "httpx>=0.27.0",  # For Discord webhook delivery
        "PyJWT>=2.8.0",  # For session token minting and validation
        "bcrypt>=4.0.0",  # For password hashing
        "pymongo>=4.6.0",  # For the MongoDB document store
        "prometheus-client>=0.19.0",  # For the Prometheus metrics driver
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "avalon-collector=avalon_collector.main:main",
        ],
    },
)
