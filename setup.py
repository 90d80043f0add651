from pathlib import Path
from setuptools import setup, find_packages


def read_readme() -> str:
    readme_path = Path(__file__).resolve().parent / "README.md"
    return readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""


setup(
    name="aescbc",
    version="1.2.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "cryptography>=41.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.10",
    description="Streaming AES-256-CBC encryptor/decryptor with PKCS7 padding",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
)
