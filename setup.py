from setuptools import setup, find_namespace_packages

setup(
    name="cfp",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["cfp", "cfp.*"]),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.5",
        "pyyaml>=6.0",
        "click>=8.0",
        "tenacity>=8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cfp=cfp.CLI.main:main",
        ],
    },
)
