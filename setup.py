from pathlib import Path

from setuptools import find_packages, setup

BASE_DIR = Path(__file__).parent.resolve()
PACKAGE_NAME = "flowlog_tagger"


def _read_version() -> str:
    init_file = BASE_DIR / PACKAGE_NAME / "__init__.py"
    for raw_line in init_file.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("__version__"):
            return line.split("=", 1)[1].strip().strip("\"'")
    raise ValueError(f"No se encontró __version__ en {init_file}")


base_requires = [
    "PyYAML>=6.0",
    "requests>=2.32",
]
test_requires = [
    "pytest>=8.0",
]

setup(
    name="flowlog-tagger",
    version=_read_version(),
    description="Flow log classification by port/protocol lookup with aggregate tag counts",
    packages=find_packages(exclude=("tests", "tests.*", "docs")),
    python_requires=">=3.10",
    install_requires=base_requires,
    extras_require={"test": test_requires},
    entry_points={
        "console_scripts": [
            "flowlog-tagger=flowlog_tagger.cli.app:main",
        ]
    },
)
