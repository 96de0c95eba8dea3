from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="shopfront",
    version="0.1.0",
    author="Laurence Stephan",
    author_email="your.email@example.com",
    description="Cached, encrypted site settings with signed media URLs for Flask storefronts",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/shopfront",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: Flask",
    ],
    python_requires=">=3.9",
    install_requires=[
        "Flask>=3.0.0",
        "Flask-SQLAlchemy>=3.1.0",
        "SQLAlchemy>=2.0",
        "click>=8.1",
        "python-dotenv>=1.0.0",
        "cryptography>=41.0",
        "boto3>=1.28",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-flask>=1.2",
            "black>=22.0",
            "flake8>=5.0",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
