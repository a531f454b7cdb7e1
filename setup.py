from setuptools import setup, find_packages

setup(
    name="code-autofix",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "pyyaml",
        "textual",
        "tqdm>=4.60",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "code-autofix=code_autofix.orchestrator.cli:main",
        ],
    },
    description="Locate and apply AI-proposed code fixes without corrupting the document.",
)
