"""Import-order checks for the database and model packages.

Each case runs in a fresh interpreter so nothing is already cached in
``sys.modules`` when the first import happens.
"""

import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent.parent.parent


@pytest.mark.parametrize(
    "statement",
    [
        "import edustack.core.database.entities",
        "from edustack.core.database import entities",
        "import edustack.core.models.domain.enums",
        "import edustack.core.models",
        "import edustack.core.database.repositories.enrollments",
        "import edustack.core.models.io",
    ],
)
def test_first_import_succeeds(statement):
    result = subprocess.run(
        [sys.executable, "-c", f"{statement}; import edustack.core.models.io, edustack.core.database.repositories"],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0, f"{statement!r} failed: {result.stderr}"


def test_models_package_does_not_load_io_schemas():
    result = subprocess.run(
        [
            sys.executable,
            "-c",
            "import sys, edustack.core.models; print('edustack.core.models.io' in sys.modules)",
        ],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == "False"
