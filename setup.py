#!/usr/bin/env python3
# setup.py

from setuptools import setup, find_packages
import pathlib

here = pathlib.Path(__file__).parent.resolve()
long_description = (here / "README.md").read_text(encoding="utf-8")

setup(
    name="floatchat-explorer",
    version="1.0.0",
    description="Exploration state engine for ARGO float catalogs: filtering, comparison, export planning and chat",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="FloatChat Team",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="argo, oceanography, data-exploration, visualization, chat",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    py_modules=["config", "main"],
    python_requires=">=3.9",
    install_requires=[
        "plotly>=5.15.0",
        "pandas>=2.0.0",
        "numpy>=1.21.0",
        "sqlalchemy>=2.0.0",
        "python-dotenv>=1.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.3.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "floatchat-explorer=main:main",
        ],
    },
    package_data={
        "data": ["*.yaml"],
    },
)
