"""Tests for bottom-up landscape generation."""

from __future__ import annotations

import random

import pytest

from tracegen.landscape import LandscapeGenerator, count_non_synthetic_packages, generate_landscape
from tracegen.model import Application, all_child_classes, class_fqn, iter_packages, package_depth
from tracegen.serialization import clean_landscape
from tracegen.types import AppGenerationParameters

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _tree_classes(app: Application) -> list:
    result = []
    for root in app.root_packages:
        result.extend(all_child_classes(root))
    return result


def _dump(apps: list[Application]) -> list[dict]:
    return [cleaned.to_json_dict() for cleaned in clean_landscape(apps)]


# ---------------------------------------------------------------------------
# Shape and bounds
# ---------------------------------------------------------------------------


class TestGenerateLandscape:
    """Tests for generate_landscape."""

    def test_app_count(self) -> None:
        apps = generate_landscape(AppGenerationParameters(app_count=4, seed=1))
        assert len(apps) == 4

    @pytest.mark.parametrize("app_count", [10, 100])
    def test_app_names_unique(self, app_count: int) -> None:
        """All apps of one call draw from one shared name pool."""
        params = AppGenerationParameters(
            app_count=app_count, min_class_count=1, max_class_count=2, seed=1
        )
        apps = generate_landscape(params)
        names = [a.name for a in apps]
        assert len(set(names)) == len(names)

    @pytest.mark.parametrize("seed", [0, 1, 7, 99])
    def test_class_and_method_bounds(self, seed: int) -> None:
        params = AppGenerationParameters(
            app_count=3,
            min_class_count=4,
            max_class_count=9,
            min_method_count=2,
            max_method_count=4,
            seed=seed,
        )
        for app in generate_landscape(params):
            assert 4 <= len(app.classes) <= 9
            for code_class in app.classes:
                assert 2 <= len(code_class.methods) <= 4
                assert code_class.parent_app_name == app.name

    @pytest.mark.parametrize("seed", [3, 4, 5])
    def test_entry_point_is_member(self, seed: int) -> None:
        """The entry point is one of the app's own class instances."""
        for app in generate_landscape(AppGenerationParameters(app_count=3, seed=seed)):
            assert any(c is app.entry_point for c in app.classes)

    def test_flat_lists_share_identity_with_tree(self) -> None:
        """classes/packages/methods hold the tree's instances, not copies."""
        app = generate_landscape(AppGenerationParameters(seed=6))[0]
        assert {id(c) for c in _tree_classes(app)} == {id(c) for c in app.classes}
        assert {id(p) for p in iter_packages(app.root_packages)} == {id(p) for p in app.packages}
        tree_methods = {id(m) for c in app.classes for m in c.methods}
        assert tree_methods == {id(m) for m in app.methods}

    def test_parent_chain_ends_at_namespace_root(self) -> None:
        app = generate_landscape(AppGenerationParameters(seed=8))[0]
        for code_class in app.classes:
            package = code_class.parent
            assert package is not None
            while package.parent is not None:
                package = package.parent
            assert package is app.root_packages[0]
            assert package.name == "org"

    def test_fqn_starts_with_namespace(self) -> None:
        app = generate_landscape(AppGenerationParameters(seed=9))[0]
        prefix = f"org.tracegenerator.{app.name.replace('-', '')}."
        for code_class in app.classes:
            assert class_fqn(code_class).startswith(prefix)

    @pytest.mark.parametrize("depth", [1, 3, 6])
    def test_tree_depth(self, depth: int) -> None:
        """The deepest layer always holds a class, so depth is exact."""
        params = AppGenerationParameters(package_depth=depth, seed=depth)
        app = generate_landscape(params)[0]
        assert package_depth(app.root_packages) == depth + 3


class TestScenarios:
    """Fixed-parameter scenarios."""

    def test_deterministic_sizing(self) -> None:
        """Depth 0 and fixed counts give an exact landscape."""
        params = AppGenerationParameters(
            app_count=1,
            package_depth=0,
            min_class_count=5,
            max_class_count=5,
            min_method_count=1,
            max_method_count=1,
        )
        apps = generate_landscape(params)
        assert len(apps) == 1
        app = apps[0]
        assert len(app.classes) == 5
        assert all(len(c.methods) == 1 for c in app.classes)
        assert count_non_synthetic_packages(app) == 0
        assert len(app.packages) == 3

    def test_zero_balance(self) -> None:
        """Balance 0 puts one class at the bottom and the rest in the namespace."""
        params = AppGenerationParameters(
            package_depth=3,
            min_class_count=8,
            max_class_count=8,
            balance=0.0,
            seed=12,
        )
        app = generate_landscape(params)[0]
        innermost = app.root_packages[0].subpackages[0].subpackages[0]
        assert len(innermost.classes) == 7
        assert len(app.classes) == 8

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_full_balance(self, seed: int) -> None:
        """Balance 1 still respects the bounds and keeps a class at the bottom."""
        params = AppGenerationParameters(
            package_depth=4,
            min_class_count=6,
            max_class_count=15,
            balance=1.0,
            seed=seed,
        )
        app = generate_landscape(params)[0]
        assert 6 <= len(app.classes) <= 15

        def chain_length(code_class) -> int:
            length, package = 0, code_class.parent
            while package is not None:
                length += 1
                package = package.parent
            return length

        assert max(chain_length(c) for c in app.classes) == params.package_depth + 3


class TestDeterminism:
    """Same seed, same landscape."""

    def test_same_seed_same_landscape(self) -> None:
        params = AppGenerationParameters(app_count=3, seed=1234)
        assert _dump(generate_landscape(params)) == _dump(generate_landscape(params))

    def test_explicit_rng(self) -> None:
        """An explicit random source takes the place of the seed."""
        params = AppGenerationParameters(app_count=2)
        first = generate_landscape(params, rng=random.Random(5))
        second = generate_landscape(params, rng=random.Random(5))
        assert _dump(first) == _dump(second)

    def test_different_seeds_differ(self) -> None:
        params_a = AppGenerationParameters(app_count=2, max_class_count=50, seed=1)
        params_b = AppGenerationParameters(app_count=2, max_class_count=50, seed=2)
        assert _dump(generate_landscape(params_a)) != _dump(generate_landscape(params_b))


class TestLandscapeGenerator:
    """Tests for the generator object itself."""

    def test_shared_pool_across_calls(self) -> None:
        """Successive generate() calls keep drawing from the same pool."""
        generator = LandscapeGenerator(random.Random(3))
        params = AppGenerationParameters()
        before = generator.names.remaining("app")
        generator.generate(params)
        generator.generate(params)
        assert generator.names.remaining("app") == before - 2

    def test_large_app_falls_back_to_synthesized_names(self) -> None:
        """More classes than pooled names still yields a full landscape."""
        params = AppGenerationParameters(min_class_count=100, max_class_count=100)
        apps = LandscapeGenerator(random.Random(4)).generate_many(params, 2)
        assert sum(len(a.classes) for a in apps) == 200
