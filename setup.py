from setuptools import setup, find_packages

setup(
    name             = 'cdrquery',
    version          = '1.0.0',
    description      = 'CDR Query: read-only queries over call detail records loaded from CSV files',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest', 'httpx'],
    },
    entry_points     = {
        'console_scripts': [
            'cdrquery     = cdrquery.cli:main',
            'cdrquery-api = cdrquery.api:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
