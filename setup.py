# -*- coding: utf-8 -*-
"""secret_token_rotator a module for rotating api tokens held in a versioned secret store.

Runs the createSecret, setSecret, testSecret and finishSecret phases of a rotation against
GCP Secret Manager or AWS Secrets Manager, promoting a new token to current only after
it has been proven to work.

"""

import setuptools
import re
from io import open

VERSIONFILE="secret_token_rotator/_version.py"
verstrline = open(VERSIONFILE, "rt").read()
VSRE = r"^__version__ = ['\"]([^'\"]*)['\"]"
mo = re.search(VSRE, verstrline, re.M)
if mo:
    verstr = mo.group(1)
else:
    raise RuntimeError("Unable to find version string in %s." % (VERSIONFILE,))

with open("README.md", "r", encoding='utf-8') as fh:
    long_description = fh.read()

setuptools.setup(
    name='secret_token_rotator',
    version=verstr,
    description="Staged rotation of api tokens held in GCP Secret Manager or AWS Secrets Manager "
                "that never promotes a token before it is proven valid",
    long_description_content_type="text/markdown",
    long_description=long_description,
    packages=setuptools.find_packages(),
    python_requires=">=3.8",
    include_package_data=True,
    license="MIT",
    scripts=[],
    install_requires=[
        "google-cloud-secret-manager~=2.0",
        "google-cloud-storage>1.0,<4.0",
        "google-crc32c~=1.0",
        "boto3~=1.26",
        "requests~=2.0",
        "PyJWT~=2.0"
    ],
    extras_require={
        "test": ["pytest"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],

)
