"""Setup configuration for IPEDSR package."""

from setuptools import setup, find_packages

setup(
    name="ipedsr",
    version="0.3.0",
    description="IPEDS survey table registry and cross-year consolidation over DuckDB",
    author="",
    author_email="",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"ipedsr.config": ["*.yaml"]},
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "duckdb>=1.0.0",
        "pandas>=2.1.0",
        "python-dotenv>=1.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0.0",
            "pytest-cov>=4.1.0",
        ],
        "dev": [
            "pytest>=8.0.0",
            "pytest-cov>=4.1.0",
            "black>=24.1.0",
            "ruff>=0.2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ipedsr=ipedsr.cli:main",
        ],
    },
)
