#!/usr/bin/env python

import re


from setuptools import setup


version = ''
with open('azstorage/__init__.py', 'r') as fd:
    version = re.search(r'^__version__\s*=\s*[\'"]([^\'"]*)[\'"]',
                        fd.read(), re.MULTILINE).group(1)

if not version:
    raise RuntimeError('Cannot find version information')


with open('README.rst', 'rb') as f:
    readme = f.read().decode('utf-8')

setup(
    name='azstorage',
    version=version,
    description='Azure Storage REST SDK with SharedKey and bearer token signing',
    long_description=readme,
    packages=['azstorage'],
    install_requires=['requests>=2.20.0',
                      'urllib3>=1.26.0',
                      ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    include_package_data=True,
    python_requires='>=3.7',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ]
)
