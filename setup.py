#!/usr/bin/python

import codecs
import os
import re

from setuptools import setup, find_packages


here = os.path.abspath(os.path.dirname(__file__))


def read(*parts):
    with codecs.open(os.path.join(here, *parts), 'r') as f:
        return f.read()


def find_version(*file_paths):
    version_file = read(*file_paths)
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]",
                              version_file, re.M)
    if version_match:
        return version_match.group(1)
    raise RuntimeError("Unable to find version string.")


if __name__ == '__main__':
    setup(
        name="ldapauth",
        version=find_version("ldapauth", "__init__.py"),
        description="LDAP authentication for presenter and client logins, "
                    "on Twisted",
        license="MIT",
        author="The ldapauth developers",
        packages=find_packages(include=["ldapauth", "ldapauth.*"]),
        python_requires=">=3.8",
        install_requires=[
            "Twisted[tls]",
            "zope.interface",
            "ldaptor",
        ],
        entry_points={
            "console_scripts": [
                "ldapauth-check = ldapauth._scripts.checkauth:console_script",
            ],
        },
        classifiers=[
            "Framework :: Twisted",
            "License :: OSI Approved :: MIT License",
            "Programming Language :: Python :: 3",
            "Topic :: System :: Systems Administration :: Authentication/Directory :: LDAP",
        ],
    )
