"""The setup script."""
from setuptools import setup, find_packages


def parse_requirements(path: str) -> list[str]:
    with open(path) as f:
        lines = map(lambda line: line.split("#")[0].strip(), f.readlines())
        return [line for line in lines if line]


with open("README.rst") as readme_file:
    readme = readme_file.read()

# get the requirements from requirements.txt
reqs = parse_requirements("requirements.txt")

dev_requirements = ["pycryptodome>=3.20", "coverage>=7.0", "black>=24.0"]

setup(
    name="tron-mamba",
    python_requires=">=3.10",
    version="0.3",
    description="Python SDK for building and signing TRON transactions",
    long_description=readme,
    long_description_content_type="text/x-rst",
    packages=find_packages(include=["tron3", "tron3.*"]),
    include_package_data=True,
    install_requires=reqs,
    extras_require={"dev": dev_requirements},
    license="MIT license",
    zip_safe=False,
    keywords="tron, trx, python, SDK",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
