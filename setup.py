"""Setuptools config for ssmi-atmosphere."""

from setuptools import setup

setup(
    name="ssmi-atmosphere",
    version="0.1.0a0",
    packages=["ssmi_atmosphere"],
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "netCDF4",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
)
