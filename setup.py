"""
Minimal setup.py for the LAN Scanner

Install for development with:
    pip install -e ".[dev]"

Run with:
    lanscanner --api-port 8080
"""

from pathlib import Path

from setuptools import find_namespace_packages, setup

# Read README for long description
readme_path = Path("README.md")
long_description = ""
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="lanscanner",
    version="0.1.0",
    description="Discovers Bluesound, Volumio, Spotify Connect and Qobuz Connect devices on the LAN over mDNS",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["lanscanner", "lanscanner.*"]),
    entry_points={
        "console_scripts": [
            "lanscanner=lanscanner.__main__:main",
        ],
    },
    zip_safe=False,
    python_requires=">=3.10",
    install_requires=[
        "fastapi",
        "pydantic>=2",
        "setproctitle",
        "uvicorn",
        "websockets",
        "zeroconf>=0.131",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
        "dev": [
            "pytest",
            "pytest-cov",
            "httpx",
            "black",
            "flake8",
            "mypy",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: POSIX :: Linux",
        "Topic :: System :: Networking",
    ],
)
