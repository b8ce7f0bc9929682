#!/usr/bin/env python

# Authors: The eegsim contributors.
# License: BSD-3-Clause

import os
import os.path as op

from setuptools import setup


def parse_requirements_file(fname):
    requirements = list()
    with open(fname, "r") as fid:
        for line in fid:
            req = line.strip()
            if req.startswith("#"):
                continue
            # strip end-of-line comments
            req = req.split("#", maxsplit=1)[0].strip()
            if req:
                requirements.append(req)
    return requirements


def package_tree(pkgroot):
    """Get the submodule list."""
    # Adapted from VisPy
    path = op.dirname(__file__)
    subdirs = [
        op.relpath(i[0], path).replace(op.sep, ".")
        for i in os.walk(op.join(path, pkgroot))
        if "__init__.py" in i[2]
    ]
    return sorted(subdirs)


if __name__ == "__main__":
    if op.exists("MANIFEST"):
        os.remove("MANIFEST")

    install_requires = parse_requirements_file("requirements_base.txt")
    hdf5_requires = parse_requirements_file("requirements_hdf5.txt")
    test_requires = parse_requirements_file("requirements_testing.txt")
    setup(
        name="eegsim",
        version="0.1.0",
        description="Simulation of EEG for multi-subject projects",
        license="BSD-3-Clause",
        python_requires=">=3.10",
        install_requires=install_requires,
        extras_require={
            "hdf5": hdf5_requires,
            "test": test_requires + hdf5_requires,
        },
        packages=package_tree("eegsim"),
        package_data={"eegsim": ["*.pyi", "*/*.pyi"]},
    )
