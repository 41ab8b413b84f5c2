"""Tests for trellis.parameters module."""

import pytest

from trellis.errors import ConfigurationError
from trellis.markers import parameters
from trellis.model import TestClassModel
from trellis.outcomes import fail, skip
from trellis.parameters import ParameterSet, ShapeError, decode_parameters, resolve_parameter_sets


class TestDecodeParameters:
    """Tests for decoding provider results."""

    def test_sequence_named_by_position(self):
        decoded = decode_parameters([(0, 0), [1, 1]])
        assert decoded == (ParameterSet("0", (0, 0)), ParameterSet("1", (1, 1)))

    def test_generator_accepted(self):
        decoded = decode_parameters((value, value) for value in range(3))
        assert [s.name for s in decoded] == ["0", "1", "2"]

    def test_mapping_named_by_key(self):
        decoded = decode_parameters({"zero": (0, 0), 1: (1, 1)})
        assert [s.name for s in decoded] == ["zero", "1"]
        assert decoded[1].values == (1, 1)

    def test_explicit_sets_keep_duplicate_names(self):
        decoded = decode_parameters([ParameterSet("dup", [1]), ParameterSet("dup", [2]), (3,)])
        assert [(s.name, s.values) for s in decoded] == [("dup", (1,)), ("dup", (2,)), ("2", (3,))]

    def test_empty_is_not_a_shape_error(self):
        assert decode_parameters([]) == ()

    @pytest.mark.parametrize(
        "raw",
        [
            "abc",
            b"abc",
            {(1, 2)},
            42,
            None,
            [(1,), 2],
            {"a": 1},
        ],
    )
    def test_bad_shapes(self, raw):
        assert isinstance(decode_parameters(raw), ShapeError)


class TestResolveParameterSets:
    """Tests for locating and invoking the provider."""

    def test_resolves_in_source_order(self):
        class Template:
            @parameters
            @staticmethod
            def data():
                return [("b",), ("a",)]

        sets = resolve_parameter_sets(TestClassModel(Template))
        assert [s.values for s in sets] == [("b",), ("a",)]

    def test_classmethod_provider(self):
        class Template:
            rows = [(1,)]

            @parameters
            @classmethod
            def data(cls):
                return cls.rows

        assert resolve_parameter_sets(TestClassModel(Template)) == (ParameterSet("0", (1,)),)

    def test_missing_provider(self):
        class Template:
            pass

        with pytest.raises(ConfigurationError, match="No public static parameters method on class .*Template"):
            resolve_parameter_sets(TestClassModel(Template))

    def test_instance_or_private_provider_does_not_qualify(self):
        class Template:
            @parameters
            def data(self):
                return [(1,)]

            @parameters
            @staticmethod
            def _hidden():
                return [(1,)]

        with pytest.raises(ConfigurationError, match="No public static parameters method"):
            resolve_parameter_sets(TestClassModel(Template))

    def test_ambiguous_provider(self):
        class Template:
            @parameters
            @staticmethod
            def first():
                return [(1,)]

            @parameters
            @staticmethod
            def second():
                return [(2,)]

        with pytest.raises(ConfigurationError, match=r"more than one .*first\(\), second\(\)"):
            resolve_parameter_sets(TestClassModel(Template))

    def test_wrong_shape_names_template_and_method(self):
        class Template:
            @parameters
            @staticmethod
            def data():
                return "not rows"

        with pytest.raises(ConfigurationError, match=r"Template\.data\(\) must return a collection of tuples"):
            resolve_parameter_sets(TestClassModel(Template))

    def test_empty_provider_rejected(self):
        class Template:
            @parameters
            @staticmethod
            def data():
                return {}

        with pytest.raises(ConfigurationError, match="returned no parameter sets"):
            resolve_parameter_sets(TestClassModel(Template))

    @pytest.mark.parametrize("raiser", [lambda: 1 / 0, lambda: fail("no data"), lambda: skip("no data")])
    def test_raising_provider_chained(self, raiser):
        class Template:
            @parameters
            @staticmethod
            def data():
                return raiser()

        with pytest.raises(ConfigurationError, match=r"Template\.data\(\) raised") as exc_info:
            resolve_parameter_sets(TestClassModel(Template))
        assert exc_info.value.__cause__ is not None

    def test_provider_invoked_once(self):
        calls = []

        class Template:
            @parameters
            @staticmethod
            def data():
                calls.append(1)
                return [(1,)]

        resolve_parameter_sets(TestClassModel(Template))
        assert calls == [1]
