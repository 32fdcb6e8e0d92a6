"""
Setup script for nanoget, a minimal HTTP/1.1 GET client.
"""

from setuptools import setup

setup(
    name="nanoget",
    version="0.1.0",
    description="Minimal HTTP/1.1 GET client over plain and TLS sockets",
    author="Vipin",
    author_email="vipin@example.com",
    packages=["nanoget", "nanoget.cli", "nanoget.clients", "nanoget.utils"],
    include_package_data=True,
    install_requires=[
        "click>=8.0.0",
        "rich>=10.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "nanoget=nanoget.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Internet :: WWW/HTTP",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.11",
)
