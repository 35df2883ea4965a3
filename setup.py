# Copyright (c) 2019 Riverbed Technology, Inc.
#
# This software is licensed under the terms and conditions of the MIT License
# accompanying the software ("License").  This software is distributed "AS IS"
# as set forth in the License.

from setuptools import setup


readme = open('README.rst').read()

install_requires = [
    'PyYAML>=5.1',
    'uritemplate',
    'jsonpointer',
]

test = [
    'pytest',
    'mock',
]

setup(
    name='raml2swagger',
    version='1.0.0',
    description=("raml2swagger - Convert RAML 1.0 API definitions to "
                 "Swagger 2.0 YAML"),
    long_description=readme,
    author="Riverbed Technology",
    author_email="eng-github@riverbed.com",
    packages=[
        'raml2swagger',
    ],
    package_dir={'raml2swagger': 'raml2swagger'},
    scripts=[
        'bin/raml2swagger',
    ],
    include_package_data=True,
    install_requires=install_requires,
    extras_require={
        'test': test,
        'dev': test,
        'all': [],
    },
    tests_require=test,
    keywords='raml swagger openapi',
    license='MIT',
    platforms='Linux, Mac OS, Windows',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development :: Code Generators',
    ],
    python_requires='>=3.6',
)
