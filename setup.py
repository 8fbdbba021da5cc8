from setuptools import setup, find_namespace_packages

setup(
    name="biblioteca-sync",
    version="0.1.0",
    packages=find_namespace_packages(include=['cli*', 'biblioteca*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "Click",
        "SQLAlchemy>=2.0",
        "requests",
        "pydantic>=2",
        "rdflib>=7",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "biblioteca=cli.main:main",
        ],
    },
)
