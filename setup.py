from setuptools import setup, find_packages

setup(
    name="lodgify-gateway",
    version="0.1.0",
    packages=find_packages(include=["lodgify_gateway", "lodgify_gateway.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "httpx>=0.27",
        "pydantic>=2.6",
        "pydantic-settings>=2.2",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "respx>=0.21",
        ],
    },
)
