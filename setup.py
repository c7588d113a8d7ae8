#!/usr/bin/env python

from setuptools import find_packages
from setuptools import setup

setup(name='pkisign',
      version='1.0',
      description='X.509 certificate/CRL construction and JWS/JWT signing',
      package_dir={'': 'python'},
      packages=find_packages('python'),
      package_data={'pkisign.crypto': ['testdata/*']},
      install_requires=[
          'absl-py',
          'cryptography',
          'ecdsa',
          'pyasn1',
      ],
      extras_require={
          'test': ['mock', 'pyasn1-modules', 'pytest'],
      },
      entry_points={
          'console_scripts': [
              'issue_cert=pkisign.tools.issue_cert:run',
              'jwt_tool=pkisign.tools.jwt_tool:run',
          ],
      },
     )
