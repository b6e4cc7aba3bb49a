"""Package setup for typed-features."""

from setuptools import setup, find_packages

setup(
    name="typed-features",
    version="1.0.0",
    description="Typed feature construction and aggregation for ML pipelines",
    author="ML Platform Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"typed_features": ["configs/*.yaml"]},
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "pandas>=2.0.0",
        "numpy>=1.24.0",
        "mlflow>=2.9.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.0.0",
            "flake8>=6.1.0",
        ],
    },
)
