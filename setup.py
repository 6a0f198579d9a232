#!/usr/bin/env python

from setuptools import setup

setup(
    name='xacro_parser',
    version='1.0.0',
    description='Macro expansion of xacro robot description documents',
    license='BSD',
    packages=['xacro_parser'],
    package_dir={'': 'src'},
    python_requires='>=3.6',
    install_requires=['PyYAML', 'rospkg'],
    extras_require={'test': ['pytest']},
    entry_points={
        'console_scripts': ['xacro_parser = xacro_parser:main'],
    },
)
