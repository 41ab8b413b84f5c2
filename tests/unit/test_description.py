"""Tests for trellis.description module."""

from trellis.description import Description, qualified_name


class Sample:
    pass


class TestFactories:
    """Tests for leaf and aggregate constructors."""

    def test_for_test_formats_display_name(self):
        d = Description.for_test("pkg.mod.FibonacciTest", "test[0]")
        assert d.display_name == "test[0](pkg.mod.FibonacciTest)"
        assert d.class_name == "pkg.mod.FibonacciTest"
        assert d.method_name == "test[0]"
        assert d.is_test
        assert d.has_identity

    def test_for_test_accepts_class(self):
        d = Description.for_test(Sample, "check")
        assert d.class_name == qualified_name(Sample)
        assert d.class_name.endswith("test_description.Sample")

    def test_for_suite_keeps_child_order(self):
        children = [Description.for_test("C", name) for name in ("b", "a", "c")]
        suite = Description.for_suite("C", children)
        assert [child.method_name for child in suite.children] == ["b", "a", "c"]
        assert suite.is_suite
        assert not suite.has_identity

    def test_empty_suite_is_leaf(self):
        assert Description.for_suite("empty").is_test


class TestEquality:
    """Tests for identity-based equality."""

    def test_leaves_equal_by_identity_pair(self):
        assert Description.for_test("C", "m") == Description.for_test("C", "m")
        assert Description.for_test("C", "m") != Description.for_test("C", "n")

    def test_aggregates_equal_by_display_name(self):
        first = Description.for_suite("[0]", [Description.for_test("C", "a")])
        second = Description.for_suite("[0]", [])
        assert first == second
        assert hash(first) == hash(second)

    def test_leaf_never_equals_aggregate(self):
        leaf = Description.for_test("C", "m")
        assert leaf != Description.for_suite(leaf.display_name)

    def test_same_structure_compares_whole_tree(self):
        def tree(*names):
            return Description.for_suite("C", [Description.for_test("C", n) for n in names])

        assert tree("a", "b").same_structure(tree("a", "b"))
        assert not tree("a", "b").same_structure(tree("b", "a"))
        assert not tree("a").same_structure(tree("a", "b"))

    def test_ordered_by_display_name(self):
        names = [Description.for_suite(n) for n in ("[b]", "[a]", "[c]")]
        assert [d.display_name for d in sorted(names)] == ["[a]", "[b]", "[c]"]


class TestTraversal:
    """Tests for counting and walking."""

    def test_test_count_sums_leaves(self):
        inner = Description.for_suite("[0]", [Description.for_test("C", "a[0]"), Description.for_test("C", "b[0]")])
        outer = Description.for_suite("C", [inner, Description.for_suite("[1]", [Description.for_test("C", "a[1]")])])
        assert outer.test_count() == 3
        assert [leaf.method_name for leaf in outer.leaves()] == ["a[0]", "b[0]", "a[1]"]
        assert [node.display_name for node in outer.walk()][:2] == ["C", "[0]"]

    def test_test_mechanism_is_aggregate_node(self):
        assert Description.TEST_MECHANISM.display_name == "Test mechanism"
        assert not Description.TEST_MECHANISM.has_identity
