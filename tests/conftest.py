import json
import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import integrity_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from integrity_toolkit.core.utils import canonical_manifest_text


def write_manifest(path: Path, data: dict) -> None:
    """Write a package.json in canonical form so only real changes show up."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(canonical_manifest_text(data), encoding="utf-8")


def read_json(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


# Common test fixtures
@pytest.fixture
def make_workspace(tmp_path: Path):
    """
    Factory building a workspace on disk.

    packages maps a directory name under packages/ to
    {"manifest": {...}, "sources": {relative path: text}}.
    """
    def _make(packages: dict, *, root_data: dict | None = None, name: str = "repo") -> Path:
        root = tmp_path / name
        if root_data is None:
            root_data = {"name": "root", "private": True, "devDependencies": {}}
        write_manifest(root / "package.json", root_data)
        (root / "lerna.json").write_text(
            json.dumps({"packages": ["packages/*"]}), encoding="utf-8"
        )
        for dirname, spec in packages.items():
            package_dir = root / "packages" / dirname
            write_manifest(package_dir / "package.json", spec["manifest"])
            for relative, text in spec.get("sources", {}).items():
                source = package_dir / relative
                source.parent.mkdir(parents=True, exist_ok=True)
                source.write_text(text, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def example_packages() -> dict:
    """Package A imports lodash and a local file; B declares an unused dependency."""
    return {
        "a": {
            "manifest": {"name": "a", "version": "1.0.0", "dependencies": {}},
            "sources": {
                "src/index.ts": 'import { map } from "lodash";\nimport { helper } from "./util";\n',
                "src/util.ts": "export const helper = 1;\n",
            },
        },
        "b": {
            "manifest": {"name": "b", "version": "1.0.0", "dependencies": {"left-pad": "^1.0.0"}},
            "sources": {"src/index.ts": "export const x = 1;\n"},
        },
    }
