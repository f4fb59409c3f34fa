"""Tests for pagesim.services.similarity."""

import itertools
import math

import pytest

from pagesim.models.path import PathGroup, PathSet
from pagesim.services.extractor import build_path_set
from pagesim.services.parser import parse
from pagesim.services.similarity import (
    ComparisonCounter,
    best_match,
    common_prefix_length,
    path_similarity,
    position_similarity,
    set_similarity,
    similarity,
    tag_similarity,
    validate_weight,
)


def _group(tags, positions, leaf_count):
    return PathGroup(
        tag_sequence=tuple(tags),
        occurrence_count=len(positions),
        occurrence_positions=tuple(positions),
        document_leaf_count=leaf_count,
    )


def _single(tags, label="doc"):
    return PathSet.from_positions(label, {tuple(tags): [0]})


_PAGES = {
    "article": """
        <html><head><title>A</title></head><body>
          <header><nav><a>1</a><a>2</a><a>3</a></nav></header>
          <main><article><h1>t</h1><p>a</p><p>b</p></article></main>
          <footer><p>f</p></footer>
        </body></html>""",
    "article_longer": """
        <html><head><title>B</title></head><body>
          <header><nav><a>1</a><a>2</a><a>3</a><a>4</a></nav></header>
          <main><article><h1>t</h1><p>a</p><p>b</p><p>c</p><p>d</p></article></main>
          <footer><p>f</p></footer>
        </body></html>""",
    "listing": """
        <html><head><title>C</title></head><body>
          <main><ul><li><a>x</a></li><li><a>y</a></li></ul></main>
          <table><tr><td>1</td><td>2</td></tr></table>
        </body></html>""",
    "single": "<html><body><p>only</p></body></html>",
}


@pytest.fixture(scope="module")
def path_sets():
    return {name: build_path_set(parse(html), name) for name, html in _PAGES.items()}


# ---------------------------------------------------------------------------
# Weight validation
# ---------------------------------------------------------------------------

class TestValidateWeight:
    @pytest.mark.parametrize("weight", [0, 0.0, 0.25, 1, 1.0])
    def test_accepts_unit_interval(self, weight):
        assert validate_weight(weight) == float(weight)

    @pytest.mark.parametrize("weight", [-0.01, 1.01, 5, math.nan, math.inf])
    def test_rejects_outside_unit_interval(self, weight):
        with pytest.raises(ValueError):
            validate_weight(weight)

    def test_path_similarity_rejects_bad_weight(self):
        group = _group(["html"], [0], 1)
        with pytest.raises(ValueError):
            path_similarity(group, group, 1.5)

    def test_similarity_rejects_bad_weight_even_for_equal_sets(self):
        path_set = _single(["html", "body", "p"])
        with pytest.raises(ValueError):
            similarity(path_set, path_set, -0.5)


# ---------------------------------------------------------------------------
# Tag similarity
# ---------------------------------------------------------------------------

class TestTagSimilarity:
    def test_common_prefix_stops_at_first_mismatch(self):
        assert common_prefix_length(["html", "body", "div", "p"], ["html", "body", "span", "p"]) == 2

    def test_common_prefix_of_empty(self):
        assert common_prefix_length([], ["html"]) == 0

    def test_prefix_law(self):
        shorter = _group(["html", "body"], [0], 1)
        longer = _group(["html", "body", "div", "p"], [0], 1)
        assert tag_similarity(shorter, longer) == pytest.approx(2 / 4)
        assert tag_similarity(longer, shorter) == pytest.approx(2 / 4)

    def test_disjoint_first_tag(self):
        a = _group(["html", "body", "p"], [0], 1)
        b = _group(["svg", "body", "p"], [0], 1)
        assert tag_similarity(a, b) == 0.0

    def test_identical_sequences(self):
        a = _group(["html", "body", "p"], [0], 2)
        b = _group(["html", "body", "p"], [1], 2)
        assert tag_similarity(a, b) == 1.0


# ---------------------------------------------------------------------------
# Position similarity
# ---------------------------------------------------------------------------

class TestPositionSimilarity:
    def test_shifted_positions_lower_score(self):
        a = _group(["html", "body", "p"], [0, 5], 10)
        b = _group(["html", "body", "p"], [1, 6], 10)
        assert tag_similarity(a, b) == 1.0
        # distances 1+1+1+1 over pn=9, two occurrences each
        assert position_similarity(a, b) == pytest.approx(1 - (4 / 9) / 4)
        assert position_similarity(a, b) < 1.0

    def test_count_difference_penalised(self):
        a = _group(["html", "body", "p"], [0, 1, 2], 4)
        b = _group(["html", "body", "p"], [0], 4)
        # distances (0+1+2) + 0 = 3 over pn=3 -> 1; count gap 2; 2*max = 6
        assert position_similarity(a, b) == pytest.approx(0.5)

    def test_single_leaf_documents(self):
        a = _group(["html", "body", "p"], [0], 1)
        b = _group(["html", "body", "div"], [0], 1)
        assert position_similarity(a, b) == 1.0

    def test_uses_larger_document(self):
        a = _group(["p"], [0], 2)
        b = _group(["p"], [1], 5)
        # pn = 4, distances 1 + 1
        assert position_similarity(a, b) == pytest.approx(1 - (2 / 4) / 2)

    def test_far_apart_positions_stay_in_bounds(self):
        a = _group(["p"], [0], 100)
        b = _group(["p"], [99], 100)
        assert position_similarity(a, b) == pytest.approx(0.0)


# ---------------------------------------------------------------------------
# Path similarity
# ---------------------------------------------------------------------------

class TestPathSimilarity:
    def test_single_leaf_documents_differing_leaf(self):
        a = _group(["html", "body", "p"], [0], 1)
        b = _group(["html", "body", "div"], [0], 1)
        assert path_similarity(a, b, 0.5) == pytest.approx(0.5 * (2 / 3) + 0.5 * 1.0)

    def test_equal_groups_score_one(self):
        a = _group(["html", "body", "p"], [0, 3], 5)
        assert path_similarity(a, _group(["html", "body", "p"], [0, 3], 5)) == 1.0

    def test_weight_one_uses_tags_only(self):
        a = _group(["html", "body", "p"], [0], 10)
        b = _group(["html", "body", "div"], [9], 10)
        assert path_similarity(a, b, 1.0) == pytest.approx(2 / 3)

    def test_weight_zero_uses_positions_only(self):
        a = _group(["html", "body", "p"], [0], 10)
        b = _group(["svg", "g"], [0], 10)
        assert path_similarity(a, b, 0.0) == pytest.approx(1.0)

    def test_symmetric(self):
        a = _group(["html", "body", "div", "p"], [0, 4, 7], 12)
        b = _group(["html", "body", "p"], [2, 11], 12)
        for weight in (0.0, 0.3, 0.5, 0.9, 1.0):
            assert path_similarity(a, b, weight) == path_similarity(b, a, weight)

    def test_counter_records_each_call(self):
        counter = ComparisonCounter()
        a = _group(["html"], [0], 1)
        path_similarity(a, a, counter=counter)
        path_similarity(a, a, counter=counter)
        assert counter.path_comparisons == 2
        assert counter.set_comparisons == 0


# ---------------------------------------------------------------------------
# Document similarity
# ---------------------------------------------------------------------------

class TestSetSimilarity:
    def test_identical_structure_scores_one(self):
        a = _single(["html", "body", "p"], "a")
        b = _single(["html", "body", "p"], "b")
        assert set_similarity(a, b, 0.5) == 1.0

    def test_single_leaf_documents(self):
        a = _single(["html", "body", "p"], "a")
        b = _single(["html", "body", "div"], "b")
        assert set_similarity(a, b, 0.5) == pytest.approx(5 / 6)

    def test_empty_against_non_empty(self):
        empty = PathSet(label="empty")
        other = _single(["html", "body", "p"])
        assert set_similarity(empty, other) == 0.0
        assert set_similarity(other, empty) == 0.0

    def test_two_empty_sets(self):
        assert set_similarity(PathSet(label="a"), PathSet(label="b")) == 1.0

    def test_best_match_against_empty(self):
        assert best_match(_group(["html"], [0], 1), PathSet(label="empty")) == 0.0

    def test_best_match_picks_highest(self):
        group = _group(["html", "body", "p"], [0], 1)
        other = PathSet.from_positions(
            "other", {("svg",): [0], ("html", "body", "p"): [1]}
        )
        assert best_match(group, other, 1.0) == 1.0

    def test_counter_counts_all_pairs(self):
        a = PathSet.from_positions("a", {("html", "body", "p"): [0], ("html", "body", "div"): [1]})
        b = PathSet.from_positions("b", {("html", "body", "p"): [1], ("html", "body", "span"): [0]})
        counter = ComparisonCounter()
        set_similarity(a, b, counter=counter)
        assert counter.set_comparisons == 1
        assert counter.path_comparisons == 8

    def test_similarity_alias(self, path_sets):
        a, b = path_sets["article"], path_sets["listing"]
        assert similarity(a, b, 0.7) == set_similarity(a, b, 0.7)

    def test_template_siblings_closer_than_other_layout(self, path_sets):
        siblings = similarity(path_sets["article"], path_sets["article_longer"])
        unrelated = similarity(path_sets["article"], path_sets["listing"])
        assert siblings > unrelated


class TestSimilarityProperties:
    def test_symmetry(self, path_sets):
        for a, b in itertools.combinations(path_sets.values(), 2):
            for weight in (0.0, 0.5, 1.0):
                assert similarity(a, b, weight) == similarity(b, a, weight)

    def test_self_similarity(self, path_sets):
        for path_set in path_sets.values():
            assert similarity(path_set, path_set) == 1.0
            for group in path_set.groups:
                assert path_similarity(group, group) == 1.0

    def test_bounds(self, path_sets):
        for a, b in itertools.product(path_sets.values(), repeat=2):
            for weight in (0.0, 0.25, 0.5, 0.75, 1.0):
                assert 0.0 <= similarity(a, b, weight) <= 1.0
            for group_a, group_b in itertools.product(a.groups, b.groups):
                assert 0.0 <= path_similarity(group_a, group_b) <= 1.0

    def test_partition_invariant(self, path_sets):
        for path_set in path_sets.values():
            positions = sorted(p for g in path_set.groups for p in g.occurrence_positions)
            assert positions == list(range(path_set.leaf_count))
