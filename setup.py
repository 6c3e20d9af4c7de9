from setuptools import setup, find_packages

setup(
    name="inspector_relay",
    version="0.1.0",
    packages=find_packages(include=["host", "host.*"]),
    py_modules=["mock_browser_target"],
    install_requires=[
        "python-socketio>=5.8",
        "aiohttp",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
        "opentelemetry-api",
        "opentelemetry-sdk",
        "opentelemetry-exporter-otlp-proto-http",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "inspector-relay=host.main:main",
        ],
    },
    python_requires=">=3.10",
)
