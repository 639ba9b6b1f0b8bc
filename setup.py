"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/unrealuniverse/uccmake"
KEYWORDS = "unreal unrealscript ucc compiler build make"
HERE = os.path.dirname(os.path.abspath(__file__))

with open(os.path.join(HERE, "src", "uccmake", "__init__.py"), encoding="utf-8") as f:
    VERSION = next(
        line.split('"')[1] for line in f if line.startswith("__version__")
    )


if __name__ == "__main__":
    setup(
        name="uccmake",
        version=VERSION,
        description="Build driver for UnrealScript modules compiled with ucc make",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        install_requires=[
            "psutil",
            "tqdm",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": ["uccmake = uccmake.cli:main"],
        },
        include_package_data=True)
