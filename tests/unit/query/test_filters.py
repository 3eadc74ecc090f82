"""Tests for composable query filters."""

import pytest

from mongorepo.query.filters import (
    Comparison,
    Eq,
    Filter,
    Logical,
    TextSearch,
    and_,
    build_filter,
    eq,
    exists,
    gt,
    gte,
    in_,
    lt,
    lte,
    ne,
    or_,
    regex,
    text_search,
)


class TestFilterConstructors:
    """Tests for single-clause filters."""

    def test_eq(self):
        """eq should match the value directly."""
        assert build_filter(eq("status", "active")) == {"status": "active"}

    @pytest.mark.parametrize(
        "constructor, operator",
        [(ne, "$ne"), (gt, "$gt"), (gte, "$gte"), (lt, "$lt"), (lte, "$lte")],
    )
    def test_comparisons(self, constructor, operator):
        """Comparison constructors should use the matching query operator."""
        assert build_filter(constructor("age", 30)) == {"age": {operator: 30}}

    def test_in_copies_values(self):
        """in_ should snapshot its values into a list condition."""
        values = ["a", "b"]
        f = in_("role", values)
        values.append("c")

        assert build_filter(f) == {"role": {"$in": ["a", "b"]}}

    def test_in_accepts_generators(self):
        """in_ should accept any iterable."""
        assert build_filter(in_("n", (i for i in range(3)))) == {"n": {"$in": [0, 1, 2]}}

    def test_exists(self):
        """exists should default to requiring the field."""
        assert build_filter(exists("bio")) == {"bio": {"$exists": True}}
        assert build_filter(exists("bio", False)) == {"bio": {"$exists": False}}

    def test_regex(self):
        """regex should carry pattern and options."""
        assert build_filter(regex("name", "^jo", "i")) == {"name": {"$regex": "^jo", "$options": "i"}}

    def test_text_search(self):
        """text_search should produce a $text clause."""
        assert build_filter(text_search("web -test")) == {"$text": {"$search": "web -test"}}

    def test_text_search_options(self):
        """Optional text search settings should only appear when given."""
        f = text_search("café", language="french", case_sensitive=False, diacritic_sensitive=True)
        assert build_filter(f) == {
            "$text": {
                "$search": "café",
                "$language": "french",
                "$caseSensitive": False,
                "$diacriticSensitive": True,
            }
        }

    def test_constructors_return_filter_values(self):
        """Constructors should return inspectable filter values."""
        assert eq("a", 1) == Eq("a", 1)
        assert gt("a", 1) == Comparison("a", "$gt", 1)
        assert text_search("x") == TextSearch("x")
        assert isinstance(and_(eq("a", 1)), Logical)
        assert all(isinstance(f, Filter) for f in (eq("a", 1), in_("a", [1]), or_()))


class TestLogicalFilters:
    """Tests for and_/or_ composition."""

    def test_and(self):
        """and_ should collect each child clause into one array."""
        query = build_filter(and_(gt("age", 30), eq("status", "active")))
        assert query == {"$and": [{"age": {"$gt": 30}}, {"status": "active"}]}

    def test_or(self):
        """or_ should collect each child clause under $or."""
        query = build_filter(or_(eq("role", "admin"), eq("role", "owner")))
        assert query == {"$or": [{"role": "admin"}, {"role": "owner"}]}

    def test_nested(self):
        """Logical filters should nest recursively."""
        query = build_filter(and_(or_(eq("a", 1), eq("b", 2)), eq("c", 3)))
        assert query == {"$and": [{"$or": [{"a": 1}, {"b": 2}]}, {"c": 3}]}

    def test_empty_logical_passes_through(self):
        """An empty and_/or_ should produce an empty array for the store to judge."""
        assert build_filter(and_()) == {"$and": []}
        assert build_filter(or_()) == {"$or": []}

    def test_same_key_children_stay_separate(self):
        """Children lowering to the same key should not collapse."""
        query = build_filter(or_(eq("role", "a"), eq("role", "b"), eq("role", "c")))
        assert query["$or"] == [{"role": "a"}, {"role": "b"}, {"role": "c"}]


class TestBuildFilter:
    """Tests for folding filters into one query document."""

    def test_no_filters_matches_all(self):
        """No filters should yield the empty query."""
        assert build_filter() == {}

    def test_preserves_order(self):
        """Clauses should appear in the order the filters were given."""
        query = build_filter(eq("b", 2), eq("a", 1), gt("c", 0))
        assert list(query) == ["b", "a", "c"]

    def test_merges_disjoint_operators(self):
        """Range filters on one field should merge into one condition."""
        query = build_filter(gt("age", 30), lt("age", 50))
        assert query == {"age": {"$gt": 30, "$lt": 50}}

    def test_conflicting_clauses_move_to_and(self):
        """A repeated key that cannot merge should still constrain the query."""
        query = build_filter(eq("status", "active"), eq("status", "pending"))
        assert query == {"status": "active", "$and": [{"status": "pending"}]}

    def test_overlapping_operators_move_to_and(self):
        """Two conditions with the same operator should both be kept."""
        query = build_filter(gt("age", 30), gt("age", 40))
        assert query == {"age": {"$gt": 30}, "$and": [{"age": {"$gt": 40}}]}

    def test_and_clauses_concatenate(self):
        """Two and_ filters should concatenate into one $and array."""
        query = build_filter(and_(eq("a", 1)), and_(eq("b", 2)))
        assert query == {"$and": [{"a": 1}, {"b": 2}]}

    def test_repeated_or_clauses_are_anded(self):
        """Two or_ filters should both have to hold."""
        query = build_filter(or_(eq("a", 1), eq("b", 1)), or_(eq("c", 1), eq("d", 1)))
        assert query == {
            "$or": [{"a": 1}, {"b": 1}],
            "$and": [{"$or": [{"c": 1}, {"d": 1}]}],
        }


class TestFilterReuse:
    """Filters must not leak state between queries."""

    def test_same_filter_in_two_queries(self):
        """Reusing one filter should give independent query documents."""
        shared = and_(eq("a", 1))
        first = build_filter(shared, eq("b", 2))
        second = build_filter(shared)

        first["$and"].append({"c": 3})

        assert second == {"$and": [{"a": 1}]}
        assert build_filter(shared) == {"$and": [{"a": 1}]}

    def test_apply_does_not_mutate_input(self):
        """apply should return a new document."""
        base = {"x": 1}
        extended = eq("y", 2).apply(base)

        assert base == {"x": 1}
        assert extended == {"x": 1, "y": 2}

    def test_filters_are_immutable(self):
        """Filter values should be frozen."""
        f = eq("a", 1)
        with pytest.raises(AttributeError):
            f.value = 2  # type: ignore[misc]
