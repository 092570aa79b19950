from setuptools import setup, find_packages

setup(
    name="swift-ring-sync",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "kubernetes>=26.1.0",
        "urllib3>=1.26.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
        "tabulate>=0.9.0",
        "swift>=2.30.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "swift-ring-sync=ringsync.cli:main",
        ],
    },
    python_requires=">=3.8",
)
