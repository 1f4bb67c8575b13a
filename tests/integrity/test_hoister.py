"""Tests for hoisting devDependencies into the root manifest."""
from integrity_toolkit.core.models import FindingKind
from integrity_toolkit.integrity import RootHoister
from integrity_toolkit.registry import load_workspace
from conftest import read_json


class TestRootHoister:
    """Tests for RootHoister.hoist."""

    def test_hoist_copies_dev_dependencies(self, make_workspace) -> None:
        root = make_workspace({
            "a": {"manifest": {"name": "a", "version": "1.0.0",
                               "devDependencies": {"typescript": "~4.1.3"}}},
            "b": {"manifest": {"name": "b", "version": "1.0.0",
                               "devDependencies": {"jest": "^26.4.2"}}},
        })
        workspace = load_workspace(root)

        findings = RootHoister(workspace).hoist()

        assert [f.kind for f in findings] == [FindingKind.ROOT_UPDATED]
        assert [f.message for f in findings] == ["updated"]
        assert read_json(root / "package.json")["devDependencies"] == {
            "jest": "^26.4.2",
            "typescript": "~4.1.3",
        }

    def test_hoist_keeps_root_only_entries(self, make_workspace) -> None:
        root = make_workspace(
            {"a": {"manifest": {"name": "a", "version": "1.0.0", "devDependencies": {"jest": "1"}}}},
            root_data={"name": "root", "private": True, "devDependencies": {"lerna": "^3.22.1"}},
        )
        workspace = load_workspace(root)

        RootHoister(workspace).hoist()

        assert read_json(root / "package.json")["devDependencies"] == {"jest": "1", "lerna": "^3.22.1"}

    def test_hoist_ignores_runtime_dependencies(self, make_workspace) -> None:
        root = make_workspace({
            "a": {"manifest": {"name": "a", "version": "1.0.0", "dependencies": {"lodash": "1"}}},
        })
        workspace = load_workspace(root)

        assert RootHoister(workspace).hoist() == []
        assert "lodash" not in read_json(root / "package.json")["devDependencies"]

    def test_hoist_twice_second_is_clean(self, make_workspace) -> None:
        root = make_workspace({
            "a": {"manifest": {"name": "a", "version": "1.0.0", "devDependencies": {"jest": "1"}}},
        })

        RootHoister(load_workspace(root)).hoist()

        assert RootHoister(load_workspace(root)).hoist() == []

    def test_hoist_dry_run_does_not_write(self, make_workspace) -> None:
        root = make_workspace({
            "a": {"manifest": {"name": "a", "version": "1.0.0", "devDependencies": {"jest": "1"}}},
        })
        before = (root / "package.json").read_text(encoding="utf-8")

        findings = RootHoister(load_workspace(root), dry_run=True).hoist()

        assert len(findings) == 1
        assert (root / "package.json").read_text(encoding="utf-8") == before
