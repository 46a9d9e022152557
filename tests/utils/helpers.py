"""
Helper functions for LazarusKit tests.
"""

import io
import json
import zipfile
from pathlib import Path
from typing import Dict


def write_file(path: Path, content: bytes = b"installer") -> Path:
    """Create a file, including parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


def make_zip(files: Dict[str, str]) -> bytes:
    """Build an in-memory ZIP archive from {member name: text}."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, text in files.items():
            zf.writestr(name, text)
    return buffer.getvalue()


def make_package_list(*packages) -> bytes:
    """
    Build a packagelist.json body.

    Each package is a tuple (name, display name, archive name, [(lpk, relative path)]).
    """
    data = {}
    for index, (name, display_name, archive, files) in enumerate(packages):
        data[f"PackageData{index}"] = {
            "Name": name,
            "DisplayName": display_name,
            "RepositoryFileName": archive,
        }
        data[f"PackageFiles{index}"] = [
            {"Name": lpk, "PackageRelativePath": rel} for lpk, rel in files
        ]
    return json.dumps(data).encode("utf-8")
