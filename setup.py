import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="coercive_dict",
    version="0.1.0",
    author="Baptiste Ferrand",
    author_email="bferrand.maths@gmail.com",
    description="Dict mixins coercing values on assignment and searching nested keys.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    python_requires='>=3.10',
)
