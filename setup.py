"""Setup script for notetagger package."""

from setuptools import setup, find_packages

setup(
    name="notetagger",
    version="0.1.0",
    description="Recommend tags for Markdown notes using OpenAI, Gemini, Claude or Ollama",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "requests",
        "pandas>=2.0",
        "python-dotenv",
        "python-frontmatter>=1.0",
        "PyYAML",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "notetagger=notetagger.cli:main",
        ],
    },
)
