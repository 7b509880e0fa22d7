from setuptools import find_packages, setup

setup(
    name="promptdeck-backend",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["app", "bootloader", "database"],
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "pydantic>=2.5",
        "python-multipart>=0.0.9",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "openai>=1.12",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.26",
        ],
    },
    package_data={"services.outline_generation.config": ["*.yaml"]},
    include_package_data=True,
    python_requires=">=3.11",
    description="Backend package for PromptDeck (outline generation and presentation editing)",
)
