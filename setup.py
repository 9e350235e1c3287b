from setuptools import setup, find_packages

setup(
    name="hyperdimensional",
    version="0.2.0",
    description="Hyperdimensional computing: hypervector types, algebra, similarity search and encoders",
    author="Hyperdimensional Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.7.0",
        "faiss-cpu>=1.7.0",  # or faiss-gpu for GPU support
        "jsonschema>=4.0.0",
        "python-dotenv>=0.19.0",
        "tqdm>=4.62.0",
    ],
    extras_require={
        "dev": [
            "pytest>=6.2.5",
            "black>=21.6b0",
            "isort>=5.9.2",
            "mypy>=0.910",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
    ],
    python_requires=">=3.8",
)
