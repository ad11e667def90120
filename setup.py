from __future__ import annotations

from pathlib import Path

from setuptools import find_packages, setup


def load_version() -> str:
    """Read __version__ without importing the package."""
    init_file = Path(__file__).resolve().parent / "src" / "worldanimator" / "__init__.py"
    for line in init_file.read_text(encoding="utf-8").splitlines():
        if line.startswith("__version__"):
            return line.split("=", 1)[1].strip().strip('"\'')
    return "0.0.0"


def load_dependencies() -> list[str]:
    return [
        # Request payload validation
        "pydantic>=2.0.0",
    ]


setup(
    name="worldanimator",
    version=load_version(),
    description="Keyframe parameter animation and camera path sampling for globe fly-throughs",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.9",
    install_requires=load_dependencies(),
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
