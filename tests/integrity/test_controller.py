"""
Integration Tests for the Integrity Pass

End-to-end runs of ensure_integrity over on-disk workspaces.
"""

import json
import pytest

from integrity_toolkit.core.models import TOP_KEY
from integrity_toolkit.integrity import AggregatorSpec, IntegrityConfig, ensure_integrity
from integrity_toolkit.resolution import ResolutionError
from conftest import read_json


POLICY = IntegrityConfig(versions={"lodash": "~4.17.21"})


class TestEnsureIntegrity:
    """Tests for ensure_integrity function."""

    def test_ensure_when_inconsistent_then_corrected_and_reported(self, make_workspace, example_packages):
        root = make_workspace(example_packages)

        report = ensure_integrity(root, POLICY)

        assert not report.ok
        assert report.to_dict() == {
            "a": ["Missing dependency: lodash", "Package data changed"],
            "b": ["Unused dependency: left-pad", "Package data changed"],
        }
        assert read_json(root / "packages" / "a" / "package.json")["dependencies"] == {
            "lodash": "~4.17.21",
        }
        assert read_json(root / "packages" / "b" / "package.json")["dependencies"] == {}

    def test_ensure_when_run_twice_then_second_run_clean(self, make_workspace, example_packages):
        root = make_workspace(example_packages)

        ensure_integrity(root, POLICY)
        report = ensure_integrity(root, POLICY)

        assert report.ok
        assert report.to_dict() == {}

    def test_ensure_when_specs_disagree_then_one_canonical_spec(self, make_workspace):
        """Every package ends up with the identical spec for a shared dependency."""
        root = make_workspace({
            "a": {
                "manifest": {"name": "a", "version": "1.0.0", "dependencies": {"lodash": "^4.0.0"}},
                "sources": {"src/index.ts": 'import "lodash";\n'},
            },
            "b": {
                "manifest": {"name": "b", "version": "1.0.0", "dependencies": {"lodash": "^4.17.0"}},
                "sources": {"src/index.ts": 'import "lodash";\n'},
            },
        })

        report = ensure_integrity(root, IntegrityConfig())

        assert report.to_dict() == {"b": ["Package data changed"]}
        specs = {
            read_json(root / "packages" / name / "package.json")["dependencies"]["lodash"]
            for name in ("a", "b")
        }
        assert specs == {"^4.0.0"}

    def test_ensure_when_local_package_imported_then_caret_version(self, make_workspace):
        root = make_workspace({
            "core": {"manifest": {"name": "@org/core", "version": "3.2.1"}},
            "ui": {
                "manifest": {"name": "@org/ui", "version": "1.0.0"},
                "sources": {"src/index.tsx": 'import { Token } from "@org/core/lib/token";\n'},
            },
        })

        report = ensure_integrity(root, IntegrityConfig())

        assert report.messages("@org/ui") == ["Missing dependency: @org/core", "Package data changed"]
        assert read_json(root / "packages" / "ui" / "package.json")["dependencies"] == {
            "@org/core": "^3.2.1",
        }

    def test_ensure_when_dev_dependencies_then_hoisted_to_top(self, make_workspace):
        root = make_workspace({
            "a": {"manifest": {"name": "a", "version": "1.0.0",
                               "devDependencies": {"typescript": "~4.1.3"}}},
        })

        report = ensure_integrity(root, IntegrityConfig())

        assert report.messages(TOP_KEY) == ["updated"]
        assert read_json(root / "package.json")["devDependencies"] == {"typescript": "~4.1.3"}
        assert ensure_integrity(root, IntegrityConfig()).ok

    def test_ensure_when_hoisted_spec_not_canonical_then_root_gets_canonical(self, make_workspace):
        """Hoisting happens after normalization, so the root never holds a stale spec."""
        root = make_workspace(
            {"a": {"manifest": {"name": "a", "version": "1.0.0",
                                "devDependencies": {"typescript": "^3.9.0"}}}},
            root_data={"name": "root", "devDependencies": {"typescript": "~4.1.3"}},
        )

        ensure_integrity(root, IntegrityConfig())

        assert read_json(root / "packages" / "a" / "package.json")["devDependencies"] == {
            "typescript": "~4.1.3",
        }
        assert read_json(root / "package.json")["devDependencies"] == {"typescript": "~4.1.3"}

    def test_ensure_when_aggregator_configured_then_synchronized(self, make_workspace):
        root = make_workspace({
            "all": {
                "manifest": {"name": "@org/all", "version": "1.0.0", "dependencies": {}},
                "sources": {"src/index.ts": "// header\n"},
            },
            "a": {"manifest": {"name": "@org/a", "version": "1.0.0"}},
        })
        config = IntegrityConfig(aggregator=AggregatorSpec("@org/all", header_lines=1))

        report = ensure_integrity(root, config)

        assert report.messages("@org/all") == [
            "Updated: @org/a", "Package data changed", "Index changed",
        ]
        index = (root / "packages" / "all" / "src" / "index.ts").read_text(encoding="utf-8")
        assert index == '// header\nimport "@org/a";\n'
        assert ensure_integrity(root, config).ok

    def test_ensure_when_policy_pins_local_package_then_aggregator_agrees(self, make_workspace):
        root = make_workspace({
            "all": {
                "manifest": {"name": "@org/all", "version": "1.0.0", "dependencies": {}},
                "sources": {"src/index.ts": "// header\n"},
            },
            "a": {"manifest": {"name": "@org/a", "version": "1.0.0"}},
            "b": {
                "manifest": {"name": "@org/b", "version": "1.0.0"},
                "sources": {"src/index.ts": 'import "@org/a";\n'},
            },
        })
        config = IntegrityConfig(
            versions={"@org/a": "~1.0.0"},
            aggregator=AggregatorSpec("@org/all", header_lines=1),
        )

        ensure_integrity(root, config)

        aggregator_deps = read_json(root / "packages" / "all" / "package.json")["dependencies"]
        assert aggregator_deps["@org/a"] == "~1.0.0"
        assert read_json(root / "packages" / "b" / "package.json")["dependencies"] == {
            "@org/a": "~1.0.0",
        }
        assert ensure_integrity(root, config).ok

    def test_ensure_when_dependency_unresolvable_then_raises(self, make_workspace, example_packages):
        root = make_workspace(example_packages)

        with pytest.raises(ResolutionError, match="lodash"):
            ensure_integrity(root, IntegrityConfig())

    def test_ensure_when_dry_run_then_files_untouched(self, make_workspace, example_packages):
        root = make_workspace(example_packages)
        manifest = root / "packages" / "a" / "package.json"
        before = manifest.read_text(encoding="utf-8")
        config = IntegrityConfig(versions={"lodash": "~4.17.21"}, dry_run=True)

        report = ensure_integrity(root, config)

        assert report.messages("a") == ["Missing dependency: lodash", "Package data changed"]
        assert manifest.read_text(encoding="utf-8") == before
        assert not ensure_integrity(root, config).ok

    def test_ensure_when_parallel_jobs_then_same_report(self, make_workspace, example_packages):
        sequential_root = make_workspace(example_packages, name="sequential")
        parallel_root = make_workspace(example_packages, name="parallel")

        sequential = ensure_integrity(sequential_root, POLICY)
        parallel = ensure_integrity(
            parallel_root, IntegrityConfig(versions={"lodash": "~4.17.21"}, jobs=4)
        )

        assert parallel.to_dict() == sequential.to_dict()

    def test_ensure_when_config_file_present_then_used(self, make_workspace, example_packages):
        root = make_workspace(example_packages)
        (root / "integrity.json").write_text(
            json.dumps({"versions": {"lodash": "~4.17.21"}}), encoding="utf-8"
        )

        report = ensure_integrity(root)

        assert report.messages("a")[0] == "Missing dependency: lodash"
