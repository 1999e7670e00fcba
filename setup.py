from setuptools import setup, find_packages

setup(
    name="kyusu",
    version="0.1",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "pandas",
        "beautifulsoup4",
        "tqdm",
        "orjson",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "kyusu=kyusu.cli:main",
        ],
    },
    python_requires=">=3.10",
)
