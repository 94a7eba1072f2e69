import sys

from setuptools import setup

sys.path.insert(0, 'ddcci_brightness')
from _version import __author__, __version__  # noqa: E402

setup(
    name='ddcci_brightness',
    version=__version__,
    license='MIT',
    author=__author__,
    packages=['ddcci_brightness'],
    install_requires=[
        'wmi ; platform_system=="Windows"',
        'pywin32 ; platform_system=="Windows"'
    ],
    extras_require={
        'test': ['pytest>=8.2', 'pytest-mock']
    },
    description='A Python tool to control monitor brightness over DDC/CI on Windows and Linux',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    classifiers=[
        'Development Status :: 4 - Beta',
        'License :: OSI Approved :: MIT License',
        'Operating System :: Microsoft :: Windows :: Windows 10',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3 :: Only'
    ],
    python_requires='>=3.8'
)
