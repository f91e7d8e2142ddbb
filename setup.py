from setuptools import setup, find_packages

setup(
    name="rpn-lang",
    version="0.1.0",
    description="RPN — arithmetic expression compiler and stack-machine bytecode interpreter",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="RPN Project",
    python_requires=">=3.10",
    packages=find_packages(exclude=["tests", "tests.*"]),
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "rpnc=rpn.cli:compile_main",
            "rpn=rpn.cli:interpret_main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Compilers",
    ],
)
