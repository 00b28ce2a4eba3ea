import os
from setuptools import setup, find_packages

readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
with open(readme_path) as readme:
    long_description = readme.read()

setup(name='doxie-cli',
      description='Find, list, download and delete scans on a Doxie scanner over Wi-Fi',
      long_description=long_description,
      long_description_content_type='text/markdown',
      version='0.1.0',
      packages=find_packages(exclude=['tests']),
      python_requires='>=3.10',
      install_requires=[
          'async_upnp_client',
          'Pillow',
          'prettytable',
          'requests',
      ],
      extras_require={
          'test': [
              'pytest',
          ],
      },
      entry_points={
          'console_scripts': [
              'doxie-cli = doxie_cli.cli:main',
          ]
      },
      classifiers=[
        'Programming Language :: Python :: 3'
      ])
