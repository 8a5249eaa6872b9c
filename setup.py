from setuptools import setup, find_packages

setup(
    name="cell-tracking-metrics",
    version="0.1.0",
    description="SEG and DET scores for cell segmentation and tracking benchmarks",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "fastremap",
        "lazy_loader",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
