"""Setup script for apigw-cli package."""
from pathlib import Path
from setuptools import setup, find_packages

# Read long description from README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

setup(
    name="apigw-cli",
    version="1.0.0",
    description="Register, inspect and remove API gateway routes for serverless actions",
    packages=find_packages(exclude=["tests*"]),
    python_requires=">=3.10",
    install_requires=[
        "httpx>=0.25",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "rich>=13.0",
        "typer>=0.9",
    ],
    extras_require={
        "test": ["pytest>=7.4"],
    },
    entry_points={
        "console_scripts": ["apigw=apigw_cli.cli:main"],
    },
    long_description=long_description,
    long_description_content_type="text/markdown",
)
