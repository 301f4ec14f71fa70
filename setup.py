from setuptools import setup, find_packages

setup(
    name="seatrush",
    version="1.0.0",
    description="SEATRUSH: golden-seat contention load harness",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "seatrush": ["default_run.yaml"],
    },
    install_requires=[
        "requests",
        "pyyaml",
        "colorama",
    ],
    entry_points={
        "console_scripts": [
            "seatrush=seatrush.cli:main",
        ],
    },
    python_requires=">=3.8",
)
