#!/usr/bin/env python

##
# Copyright (c) 2006-2017 Apple Inc. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
##

from os.path import dirname, abspath, join as joinpath
from setuptools import setup, find_packages
import errno
import subprocess

base_version = "1.0"
base_project = "davacl"


#
# Utilities
#

def git_output(*args):
    """
    Run a git command and return its stripped output, or C{None} if git
    isn't available or the command fails.
    """
    try:
        output = subprocess.check_output(
            ("git",) + args,
            stderr=subprocess.STDOUT,
        )
    except OSError as e:
        if e.errno == errno.ENOENT:
            return None
        raise
    except subprocess.CalledProcessError:
        return None

    return output.decode("utf-8").strip()


def git_info(wc_path):
    """
    Look up info on a GIT working copy.
    """
    branch = git_output("-C", wc_path, "rev-parse", "--abbrev-ref", "HEAD")
    if branch is None:
        return None

    revision = git_output("-C", wc_path, "rev-parse", "--verify", "HEAD")
    if revision is None:
        return None

    tags = git_output("-C", wc_path, "describe", "--exact-match", "HEAD")
    tag = tags.split()[0] if tags else None

    return dict(
        branch=branch,
        revision=revision,
        tag=tag,
    )


def version():
    """
    Compute the version number.
    """
    source_root = dirname(abspath(__file__))

    info = git_info(source_root)

    if info is None:
        # We don't have GIT info...
        return "{}a1+unknown".format(base_version)

    if info["tag"] == "{}-{}".format(base_project, base_version):
        # This is a correctly tagged release of this project.
        return base_version

    if info["branch"] == "master":
        # This is master.
        # Designate this as beta1, dev version based on git revision.
        return "{}b1.dev0+{}".format(base_version, info["revision"])

    # This is some unknown branch or tag...
    return "{}a1.dev0+{}.{}".format(
        base_version,
        info["revision"],
        info["branch"].replace("/", ".").replace("-", ".").lower(),
    )


#
# Options
#

project_name = "davacl"

description = "WebDAV access control lists for CalDAV resources"

with open(joinpath(dirname(abspath(__file__)), "README.rst")) as readme:
    long_description = readme.read()

classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Framework :: Twisted",
    "Intended Audience :: Developers",
    "License :: OSI Approved :: Apache Software License",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Office/Business :: Scheduling",
]

author = "Apple Inc."

license = "Apache License, Version 2.0"

platforms = ["all"]


#
# Dependencies
#

setup_requirements = []

install_requirements = [
    # Core frameworks
    "zope.interface",
    "Twisted>=21.2.0",
    "constantly",
]

extras_requirements = {
    "test": ["pytest"],
}


#
# Run setup
#

def doSetup():
    setup(
        name=project_name,
        version=version(),
        description=description,
        long_description=long_description,
        classifiers=classifiers,
        author=author,
        license=license,
        platforms=platforms,
        packages=find_packages(include=["davacl", "davacl.*"]),
        python_requires=">=3.6",
        setup_requires=setup_requirements,
        install_requires=install_requirements,
        extras_require=extras_requirements,
    )


#
# Main
#

if __name__ == "__main__":
    doSetup()
