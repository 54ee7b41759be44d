from __future__ import annotations

import os
import sys

from setuptools import find_packages, setup

dependencies = [
    "aiohttp>=3.11.11",  # JSON-RPC client for the node
    "click>=8.1.8",  # For the CLI
    "colorlog>=6.9.0",  # Adds color to logs
    "concurrent-log-handler>=0.9.25",  # Concurrently log and rotate logs
    "filelock>=3.16.1",  # For reading and writing config multiprocess and multithread safely  (non-reentrant locks)
    "importlib-resources>=6.4.5",  # Reads the packaged initial config
    "python-dotenv>=1.0.1",  # Reads FEEBID_RPC_URL from a .env file
    "PyYAML>=6.0.2",  # Used for config file format
    "typing-extensions>=4.12.2",  # typing backports like Protocol and Self
]

dev_dependencies = [
    "anyio>=4.8.0",  # pytest plugin running the coroutine tests
    "coverage>=7.6.10",
    "pytest>=8.3.4",
    "pytest-cov>=6.0.0",
    "pytest-mock>=3.14.0",
    "isort>=5.13.2",
    "flake8>=7.1.1",
    "mypy>=1.14.1",
    "black>=24.10.0",
    "types-pyyaml>=6.0.12.20241230",
]

kwargs = dict(
    name="feebid",
    description="Slow, average and fast fee bids for fee-market blockchains from recent block data.",
    license="Apache License",
    python_requires=">=3.9, <4",
    keywords="ethereum eip1559 fee estimation gas",
    install_requires=dependencies,
    extras_require=dict(
        dev=dev_dependencies,
    ),
    packages=find_packages(include=["feebid", "feebid.*"]),
    entry_points={
        "console_scripts": [
            "feebid = feebid.cmds.feebid:main",
        ]
    },
    package_data={
        "feebid.util": ["initial-*.yaml"],
    },
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    zip_safe=False,
)

if "setup_file" in sys.modules:
    # include dev deps in regular deps when run in snyk
    dependencies.extend(dev_dependencies)

if len(os.environ.get("FEEBID_SKIP_SETUP", "")) < 1:
    setup(**kwargs)  # type: ignore
