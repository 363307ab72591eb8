"""Tests for options, errors and JSON value helpers."""

import threading

import pytest
import vcdi_disclose
from vcdi_disclose.errors import (
    CanonicalizationLimitError,
    DisclosureError,
    DocumentContentError,
    ErrorCode,
    ProofGenerationError,
)
from vcdi_disclose.jsonvalue import JsonKind, is_scalar, json_kind, structurally_equal
from vcdi_disclose.options import DisclosureOptions, resolve_options


class TestDisclosureOptions:
    """Tests for DisclosureOptions."""

    def test_defaults(self):
        options = DisclosureOptions()
        assert options.urn_scheme == "custom-scheme"
        assert options.algorithm == "RDFC-1.0"
        assert options.max_work_factor == 1
        assert options.max_workers == 1
        assert not options.aborted()

    def test_signal(self):
        signal = threading.Event()
        options = DisclosureOptions(signal=signal)
        assert not options.aborted()
        signal.set()
        assert options.aborted()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"urn_scheme": ""},
            {"max_work_factor": -1},
            {"max_deep_iterations": -1},
            {"max_workers": 0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            DisclosureOptions(**kwargs)

    def test_resolve_urn_scheme(self):
        options = DisclosureOptions(max_workers=2)
        resolved = resolve_options(options, "other")
        assert resolved.urn_scheme == "other"
        assert resolved.max_workers == 2
        assert options.urn_scheme == "custom-scheme"

    def test_resolve_defaults(self):
        assert resolve_options(None) == DisclosureOptions()


class TestErrors:
    """Tests for the error hierarchy."""

    def test_type_url(self):
        error = CanonicalizationLimitError("too much work")
        assert error.code is ErrorCode.CANONICALIZATION_LIMIT_ERROR
        assert error.type == "https://w3id.org/security#CANONICALIZATION_LIMIT_ERROR"
        assert str(error) == "too much work"

    def test_content_error_is_value_error(self):
        assert issubclass(DocumentContentError, ValueError)
        assert issubclass(DocumentContentError, DisclosureError)

    def test_title(self):
        assert ProofGenerationError("x").title == "ProofGenerationError"
        assert ProofGenerationError("x", title="Bad pointer").title == "Bad pointer"


class TestJsonValue:
    """Tests for JSON value classification."""

    @pytest.mark.parametrize(
        "value,kind",
        [
            (None, JsonKind.NULL),
            (True, JsonKind.BOOL),
            (0, JsonKind.NUMBER),
            (1.5, JsonKind.NUMBER),
            ("", JsonKind.STRING),
            ([], JsonKind.ARRAY),
            ({}, JsonKind.OBJECT),
        ],
    )
    def test_json_kind(self, value, kind):
        assert json_kind(value) is kind

    def test_not_json(self):
        with pytest.raises(TypeError):
            json_kind(object())

    def test_is_scalar(self):
        assert is_scalar("x")
        assert not is_scalar([1])

    def test_structurally_equal(self):
        assert structurally_equal({"a": [1, {"b": 2}]}, {"a": [1.0, {"b": 2}]})
        assert not structurally_equal([1, 2], [2, 1])
        assert not structurally_equal(True, 1)
        assert not structurally_equal({"a": 1}, {"a": 1, "b": 2})


class TestPackageExports:
    """Tests for the lazy package namespace."""

    def test_lazy_exports(self):
        from vcdi_disclose.group import canonicalize_and_group

        assert vcdi_disclose.canonicalize_and_group is canonicalize_and_group
        assert vcdi_disclose.DisclosureOptions is DisclosureOptions

    def test_all_names_resolve(self):
        for name in vcdi_disclose.__all__:
            assert getattr(vcdi_disclose, name) is not None

    def test_unknown_attribute(self):
        with pytest.raises(AttributeError):
            vcdi_disclose.does_not_exist
