from setuptools import find_packages, setup


setup(
    name="permsearch",
    version="0.1.0",
    description="Variable neighbourhood descent and adaptive tabu search over permutations",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
