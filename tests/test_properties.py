"""
Property-based tests for pylayoutexport using Hypothesis.

These tests generate many cases to find edge cases in:
- Merging export properties over exported content
- Decorator chains (additive, idempotent)
- URI component encoding
- Poll policy validation
"""

import re
from types import MappingProxyType
from xml.sax.saxutils import escape

import pytest
from conftest import json_objects, key_adding_decorators
from hypothesis import given
from hypothesis import strategies as st

from pylayoutexport.decorators import apply_decorators, encode_uri_component
from pylayoutexport.models import ExportRequest, PollPolicy
from pylayoutexport.storage.s3 import first_listed_key

# ==============================================================================
# PROPERTY 1: Properties win on merge
# ==============================================================================


@pytest.mark.property
@given(exported=json_objects(), properties=json_objects())
def test_payload_merge_precedence(exported, properties):
    """
    Property: for every key, the payload holds the property value if the
    key is a property, otherwise the exported value.
    """
    payload = ExportRequest("pdf", properties).payload(exported)

    assert set(payload) == set(exported) | set(properties)
    for key, value in payload.items():
        if key in properties:
            assert value == properties[key]
        else:
            assert value == exported[key]


@pytest.mark.property
@given(exported=json_objects(), properties=json_objects())
def test_payload_does_not_mutate_inputs(exported, properties):
    exported_before = dict(exported)
    properties_before = dict(properties)

    ExportRequest("pdf", properties).payload(exported)

    assert exported == exported_before
    assert properties == properties_before


@pytest.mark.property
@given(format=st.text(min_size=1, max_size=10))
def test_event_type_uses_upper_case_format(format):
    assert ExportRequest(format).event_type == f"{format.upper()} Export"


def test_event_type_without_format():
    assert ExportRequest("").event_type == "Export"


# ==============================================================================
# PROPERTY 2: Decorator chains
# ==============================================================================


@pytest.mark.property
@given(result=json_objects(), decorators=st.lists(key_adding_decorators(), max_size=4))
def test_decorators_are_idempotent(result, decorators):
    """Property: apply(apply(r, ds), ds) == apply(r, ds)."""
    once = apply_decorators(result, decorators)
    twice = apply_decorators(once, decorators)

    assert twice == once


@pytest.mark.property
@given(result=json_objects(), decorators=st.lists(key_adding_decorators(), max_size=4))
def test_decorators_only_add_keys(result, decorators):
    decorated = apply_decorators(MappingProxyType(result), decorators)

    for key, value in result.items():
        assert decorated[key] == value


# ==============================================================================
# PROPERTY 3: URI component encoding
# ==============================================================================


@pytest.mark.property
@given(value=st.text(max_size=50))
def test_encoded_components_are_url_safe(value):
    encoded = encode_uri_component(value)

    assert re.fullmatch(r"[A-Za-z0-9\-_.!~*'()%]*", encoded)
    assert "&" not in encoded and "=" not in encoded and "/" not in encoded


# ==============================================================================
# PROPERTY 4: Poll policy
# ==============================================================================


@pytest.mark.property
@given(
    error_ms=st.integers(min_value=0, max_value=10**6),
    output_ms=st.integers(min_value=0, max_value=10**6),
)
def test_poll_policy_accepts_non_negative_periods(error_ms, output_ms):
    policy = PollPolicy.with_periods(error_ms=error_ms, output_ms=output_ms)

    assert policy.error_sleep_period_ms == error_ms
    assert policy.output_sleep_period_ms == output_ms


@pytest.mark.property
@given(negative=st.integers(max_value=-1), other=st.integers(min_value=0, max_value=100))
def test_poll_policy_rejects_negative_periods(negative, other):
    with pytest.raises(ValueError):
        PollPolicy.with_periods(error_ms=negative, output_ms=other)
    with pytest.raises(ValueError):
        PollPolicy.with_periods(error_ms=other, output_ms=negative)


def test_standard_policy_periods():
    assert PollPolicy.STANDARD == PollPolicy(15000, 2500)


# ==============================================================================
# PROPERTY 5: Listing parsing
# ==============================================================================


@pytest.mark.property
@given(
    keys=st.lists(
        st.text(
            min_size=1,
            max_size=30,
            alphabet=st.characters(whitelist_categories=("Lu", "Ll", "Nd"), whitelist_characters="/._-"),
        ),
        max_size=5,
    )
)
def test_first_listed_key(keys):
    contents = "".join(f"<Contents><Key>{escape(key)}</Key></Contents>" for key in keys)
    listing = (
        '<ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
        f"<Name>exports</Name>{contents}</ListBucketResult>"
    )

    assert first_listed_key(listing) == (keys[0] if keys else None)
