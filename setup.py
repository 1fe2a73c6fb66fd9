from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="auditstats",
    version="0.1.0",
    description="Grouped statistics over Lighthouse web-performance audit results.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.9",
    install_requires=["numpy", "pandas", "PyYAML"],
    extras_require={"test": ["pytest"]},
    tests_require=["pytest"],
    entry_points={"console_scripts": ["auditstats=auditstats.cli:main"]},
)
