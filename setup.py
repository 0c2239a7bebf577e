from setuptools import setup, find_packages

setup(
    name="flux-review",
    version="0.1.0",
    packages=find_packages(include=["flux_review", "flux_review.*"]),
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy>=2.0",
        "alembic",
        "psycopg2-binary",
        "python-dotenv",
        "pydantic>=2",
        "pydantic-settings",
        "prometheus-client",
        "prometheus-fastapi-instrumentator",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "flux-review=flux_review.main:main",
        ],
    },
)
