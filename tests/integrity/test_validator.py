"""
Unit Tests for Package Validation

Tests for version normalization, missing/unused detection, exception
lists and conditional persistence.
"""

import pytest

from integrity_toolkit.core.models import FindingKind
from integrity_toolkit.integrity import (
    ExceptionLists,
    IntegrityConfig,
    IntegrityError,
    PackageValidator,
)
from integrity_toolkit.registry import load_workspace
from integrity_toolkit.resolution import DependencyResolver, PolicyLookup, ResolutionError
from conftest import read_json


POLICY = {"lodash": "~4.17.21", "left-pad": "^1.3.0", "react": "^17.0.1", "path": "^0.12.7"}


def make_validator(workspace, config=None, policy=POLICY):
    resolver = DependencyResolver(PolicyLookup(policy))
    return PackageValidator(workspace, resolver, config or IntegrityConfig())


def messages(findings):
    return [f.message for f in findings]


class TestValidate:
    """Tests for PackageValidator.validate."""

    def test_validate_when_import_undeclared_then_added(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0"},
            "sources": {"src/index.ts": 'import { map } from "lodash/fp";\n'},
        }})
        workspace = load_workspace(root)
        package = workspace.get("a")

        findings = make_validator(workspace).validate(package)

        assert messages(findings) == ["Missing dependency: lodash", "Package data changed"]
        assert package.dependencies == {"lodash": "~4.17.21"}
        assert read_json(package.manifest_path)["dependencies"] == {"lodash": "~4.17.21"}

    def test_validate_when_declared_not_imported_then_removed(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0", "dependencies": {"left-pad": "^1.3.0"}},
            "sources": {"src/index.ts": "export const x = 1;\n"},
        }})
        workspace = load_workspace(root)
        package = workspace.get("a")

        findings = make_validator(workspace).validate(package)

        assert messages(findings) == ["Unused dependency: left-pad", "Package data changed"]
        assert read_json(package.manifest_path)["dependencies"] == {}

    def test_validate_when_consistent_then_no_findings_and_no_write(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0", "dependencies": {"lodash": "~4.17.21"}},
            "sources": {"src/index.ts": 'import "lodash";\n'},
        }})
        workspace = load_workspace(root)
        package = workspace.get("a")
        mtime = package.manifest_path.stat().st_mtime_ns

        findings = make_validator(workspace).validate(package)

        assert findings == []
        assert package.manifest_path.stat().st_mtime_ns == mtime

    def test_validate_when_spec_not_canonical_then_rewritten(self, make_workspace):
        """Only the version changed: a single 'Package data changed'."""
        root = make_workspace({"a": {
            "manifest": {
                "name": "a",
                "version": "1.0.0",
                "dependencies": {"lodash": "^4.0.0"},
                "devDependencies": {"react": "^16.0.0"},
            },
            "sources": {"src/index.ts": 'import "lodash";\n'},
        }})
        workspace = load_workspace(root)
        package = workspace.get("a")

        findings = make_validator(workspace).validate(package)

        assert messages(findings) == ["Package data changed"]
        data = read_json(package.manifest_path)
        assert data["dependencies"] == {"lodash": "~4.17.21"}
        assert data["devDependencies"] == {"react": "^17.0.1"}

    def test_validate_when_missing_excepted_then_not_added(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0", "dependencies": {}},
            "sources": {"src/index.ts": 'import * as path from "path";\n'},
        }})
        workspace = load_workspace(root)
        config = IntegrityConfig(exceptions=ExceptionLists.from_tables(missing={"a": ["path"]}))

        findings = make_validator(workspace, config).validate(workspace.get("a"))

        assert findings == []
        assert workspace.get("a").dependencies == {}

    def test_validate_when_unused_excepted_then_kept(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0", "dependencies": {"left-pad": "^1.3.0"}},
            "sources": {"src/index.ts": "export {};\n"},
        }})
        workspace = load_workspace(root)
        config = IntegrityConfig(exceptions=ExceptionLists.from_tables(unused={"a": ["left-pad"]}))

        findings = make_validator(workspace, config).validate(workspace.get("a"))

        assert findings == []
        assert workspace.get("a").dependencies == {"left-pad": "^1.3.0"}

    def test_validate_when_import_is_dev_dependency_only_then_missing(self, make_workspace):
        """Only runtime dependencies satisfy an import."""
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0", "devDependencies": {"lodash": "~4.17.21"}},
            "sources": {"src/index.ts": 'import "lodash";\n'},
        }})
        workspace = load_workspace(root)

        findings = make_validator(workspace).validate(workspace.get("a"))

        assert messages(findings)[0] == "Missing dependency: lodash"

    def test_validate_when_dev_dependency_not_imported_then_kept(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0", "devDependencies": {"react": "^17.0.1"}},
            "sources": {"src/index.ts": "export {};\n"},
        }})
        workspace = load_workspace(root)

        assert make_validator(workspace).validate(workspace.get("a")) == []

    def test_validate_when_self_import_then_ignored(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "@org/a", "version": "1.0.0"},
            "sources": {"src/index.ts": 'import { x } from "@org/a/lib/x";\n'},
        }})
        workspace = load_workspace(root)

        assert make_validator(workspace).validate(workspace.get("@org/a")) == []

    def test_validate_when_no_source_files_then_only_normalized(self, make_workspace):
        """Without sources nothing is reported missing or unused."""
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0", "dependencies": {"left-pad": "^1.0.0"}},
        }})
        workspace = load_workspace(root)
        package = workspace.get("a")

        findings = make_validator(workspace).validate(package)

        assert messages(findings) == ["Package data changed"]
        assert package.dependencies == {"left-pad": "^1.3.0"}

    def test_validate_when_findings_then_sorted_by_name(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0"},
            "sources": {
                "src/b.ts": 'import "react";\n',
                "src/a.tsx": 'import "lodash";\nimport "left-pad";\n',
            },
        }})
        workspace = load_workspace(root)

        findings = make_validator(workspace).validate(workspace.get("a"))

        assert messages(findings)[:3] == [
            "Missing dependency: left-pad",
            "Missing dependency: lodash",
            "Missing dependency: react",
        ]

    def test_validate_when_dry_run_then_nothing_written(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0"},
            "sources": {"src/index.ts": 'import "lodash";\n'},
        }})
        workspace = load_workspace(root)
        package = workspace.get("a")
        before = package.manifest_path.read_text(encoding="utf-8")

        findings = make_validator(workspace, IntegrityConfig(dry_run=True)).validate(package)

        assert FindingKind.PACKAGE_DATA_CHANGED in [f.kind for f in findings]
        assert package.manifest_path.read_text(encoding="utf-8") == before

    def test_validate_when_import_unresolvable_then_raises(self, make_workspace):
        root = make_workspace({"a": {
            "manifest": {"name": "a", "version": "1.0.0"},
            "sources": {"src/index.ts": 'import "unknown-lib";\n'},
        }})
        workspace = load_workspace(root)

        with pytest.raises(ResolutionError, match="unknown-lib"):
            make_validator(workspace).validate(workspace.get("a"))

    def test_validate_when_source_not_utf8_then_raises(self, make_workspace):
        root = make_workspace({"a": {"manifest": {"name": "a", "version": "1.0.0"}}})
        source = root / "packages" / "a" / "src" / "index.ts"
        source.parent.mkdir(parents=True)
        source.write_bytes(b"\xff\xfe")
        workspace = load_workspace(root)

        with pytest.raises(IntegrityError, match="Cannot read source file"):
            make_validator(workspace).validate(workspace.get("a"))


class TestPrefetchImports:
    """Tests for PackageValidator.prefetch_imports."""

    def test_prefetch_when_run_then_same_result_as_sequential(self, make_workspace, example_packages):
        root = make_workspace(example_packages)
        workspace = load_workspace(root)
        validator = make_validator(workspace)

        validator.prefetch_imports(workspace.all(), max_workers=4)

        assert validator.collect_imports(workspace.get("a")) == {"lodash"}
        assert validator.collect_imports(workspace.get("b")) == set()
