"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/L1X-Foundation/cargo-l1x"
KEYWORDS = "l1x ebpf wasm llvm smart-contract cargo compiler toolchain"
HERE = os.path.dirname(os.path.abspath(__file__))


if __name__ == "__main__":
    setup(
        name="cargo-l1x",
        version="0.1.0",
        description="Build L1X eBPF smart contracts from Rust crates and scaffold new contract projects",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.9",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        package_data={
            "cargo_l1x.packages": [
                "default_template/.gitignore",
                "default_template/Cargo.toml.template",
                "default_template/src/*.rs",
            ]
        },
        include_package_data=True,
        install_requires=[
            "requests>=2.28",
            "tqdm>=4.64",
        ],
        extras_require={
            "test": [
                "pytest>=7.0",
            ],
        },
        entry_points={
            "console_scripts": [
                "cargo-l1x=cargo_l1x.cli:main",
            ],
        },
    )
