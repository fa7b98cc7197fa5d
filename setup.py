from setuptools import setup, find_packages

setup(
    name="profilehub",
    version="0.1.0",
    description="Manage resume master data & job-tailored profiles, optionally tuned with the OpenAI Responses API",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "typer",
        "click",
        "rich",
        "openai",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-socket",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "profilehub=profilehub.cli.app:app",
        ],
    },
    python_requires=">=3.11",
)
