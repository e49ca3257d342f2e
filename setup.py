"""
AuditChain: tamper-evident audit ledger

AuditChain groups a continuous stream of audit events into immutable blocks,
each carrying the SHA-512 hash of its predecessor, and keeps the chain position
in a durable state store so block creation resumes correctly after a restart.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh.readlines() if line.strip() and not line.startswith("#")]

# Get version from the package
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '.'))
from auditchain import __version__

setup(
    name="AuditChain",
    version=__version__,
    author="AuditChain contributors",
    description="Hash-chained audit block ledger",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=['auditchain', 'auditchain.*'], exclude=['tests*']),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "auditchain=auditchain.cli:cli",
        ],
    },
    python_requires=">=3.10",
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "Topic :: Security",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
    keywords="audit, ledger, hash chain, blockchain",
)
