"""Setup configuration for langgraph-checkpoint-dynamodb package."""

from setuptools import setup, find_packages

setup(
    name="langgraph-checkpoint-dynamodb",
    version="0.1.0",
    description="LangGraph checkpoint saver backed by Amazon DynamoDB",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "boto3>=1.28.0",
        "botocore>=1.31.0",
        "langchain-core>=0.2.0",
        "langgraph-checkpoint>=2.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.11.0",
            "ruff>=0.1.0",
            "mypy>=1.5.0",
            "black>=23.0.0",
        ],
    },
)
