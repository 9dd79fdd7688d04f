"""Setup configuration for doradash"""

from setuptools import setup, find_packages

setup(
    name="github-dora-metrics",
    version="0.1.0",
    description=(
        "DORA metrics dashboard for a GitHub repository: deployment frequency, "
        "lead time, change failure rate and time to restore service."
    ),
    author="GitHub DORA Metrics Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.22.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "httpx>=0.24.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "github-dora-metrics=doradash.main:main",
            "github-dora-metrics-api=doradash.api:serve",
        ],
    },
)
