"""
Setup script for the spring-autohost package.

Installs the spring_autohost library (autohost datagram decoder,
session state tracker and callback dispatcher) plus the
`spring-autohost-monitor` console script.
"""

from setuptools import setup, find_packages

setup(
    name="spring-autohost",
    version="1.0.0",
    description="Callback-based client for the Spring RTS engine autohost UDP interface",
    license="GPL-3.0-or-later",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
        "dev": [
            "pytest>=7.0",
            "build",
            "wheel",
        ],
    },
    entry_points={
        "console_scripts": [
            "spring-autohost-monitor=spring_autohost.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Games/Entertainment :: Real Time Strategy",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
