# setup.py
from setuptools import setup, find_packages

setup(
    name="chronolog",
    version="1.0.0",
    description="Append-only logger with size-based rotation, gzip archives and age-based retention",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'chronolog=chronolog.interface.cli.app:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
