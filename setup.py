import os
import sys
import configparser

from setuptools import setup

sys.path.append(os.path.dirname(__file__))

# Pure-Python package. The point-in-polygon kernel is compiled at runtime by
# numba, so there are no extension modules to build.


def get_version():
    """
    Read __version__ from the package without importing it
    """

    here = os.path.dirname(os.path.abspath(__file__))
    with open(os.path.join(here, "oceangrid", "__init__.py")) as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=")[1].strip().strip("\"'")
    raise RuntimeError("Unable to find __version__ in oceangrid/__init__.py")


def get_requirements():
    """
    Runtime requirements, one per line in setup.cfg
    """

    config = configparser.ConfigParser()
    config.read(os.path.join(os.path.dirname(os.path.abspath(__file__)), "setup.cfg"))
    requirements = config["options"]["install_requires"].split()

    return requirements


if __name__ == "__main__":
    setup(
        install_requires=get_requirements(),
        version=get_version(),
        zip_safe=False,
    )
