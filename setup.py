"""
Setup configuration for rarity-crafting-market package.

This package deploys the RarityCraftingMarket smart contract behind an
upgradeable proxy from Hardhat-compiled artifacts.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read version from package
version_file = Path(__file__).parent / "rarity_crafting_market" / "__init__.py"
version = "1.0.0"  # Default version
if version_file.exists():
    with open(version_file) as f:
        for line in f:
            if line.startswith("__version__"):
                version = line.split("=")[1].strip().strip('"').strip("'")
                break

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    with open(readme_file, encoding="utf-8") as f:
        long_description = f.read()

TEST_REQUIRES = [
    "pytest>=7.0.0",
    "pytest-cov>=3.0.0",
    "web3[tester]>=7.0.0",
    "py-solc-x>=2.0.0",
]

setup(
    name="rarity-crafting-market",
    version=version,
    description="Deployment tooling for the RarityCraftingMarket upgradeable contract",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    package_data={
        "rarity_crafting_market": [
            "data/*.json",
        ],
    },
    install_requires=[
        "web3>=7.0.0",
        "eth-account>=0.13.0",
        "eth-abi>=5.0.1",
        "eth-utils>=4.0.0",
        "hexbytes>=1.2.0",
        "loguru>=0.7.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "tester": [
            "web3[tester]>=7.0.0",
        ],
        "test": TEST_REQUIRES,
        "dev": TEST_REQUIRES + [
            "black>=22.0.0",
            "flake8>=4.0.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "rarity-market=rarity_crafting_market.cli:main",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: System :: Distributed Computing",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    keywords="ethereum, fantom, blockchain, rarity, upgradeable-proxy, smart-contracts, web3",
)
