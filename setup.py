from setuptools import setup, find_namespace_packages

setup(
    name="so2local",
    version="0.1.0",
    description="Launcher for the SO2 assignment container",
    packages=find_namespace_packages(where="src", include=["so2local", "so2local.*"]),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0",
        "click>=8.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
        "dev": [
            "black>=23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "so2local=so2local.CLI.main:main",
        ],
    },
)
