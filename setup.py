# setup.py
from setuptools import setup, find_packages

setup(
    name="tidyeval",
    version="0.1.0",
    description="Expression capture, quasiquotation and quosure evaluation for an R-flavoured language",
    packages=find_packages(include=["tidyeval", "tidyeval.*"]),
    python_requires=">=3.10",
    install_requires=["numpy"],
    extras_require={"test": ["pytest", "hypothesis"]},
    zip_safe=False,
)
