"""
Setup script for pwmermaid
"""

from setuptools import setup, find_packages

setup(
    name="pwmermaid",
    version="0.1.0",
    description="Mermaid flow diagrams from Playwright test files via tree-sitter",
    author="pwmermaid Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "tree-sitter>=0.23,<0.26",
        "tree-sitter-javascript>=0.23,<0.26",
        "tree-sitter-typescript>=0.23,<0.26",
        "rich>=13.9.4",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pwmermaid=pwmermaid.cli:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Documentation",
        "Topic :: Software Development :: Testing",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
