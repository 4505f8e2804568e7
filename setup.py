import os
from setuptools import setup, find_packages

def parse_requirements(requirements):
    with open(os.path.join(os.path.dirname(os.path.abspath(__file__)), requirements)) as f:
        return [l.strip('\n') for l in f if l.strip('\n') and not l.startswith('#')]

requirements = parse_requirements("requirements.txt")

setup(
    name='courseaccess_backend',
    version='0.0.1',
    python_requires='>=3.10',
    install_requires=requirements,
    package_dir={'': 'src'},
    packages=find_packages('src'),
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "caccess=courseaccess_backend.cli.cli:cli",
        ],
    }
)
