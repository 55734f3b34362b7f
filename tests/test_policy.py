import pytest

from core.compression.format import ImageEncoding
from core.compression.policy import (
    DEFAULT_RESIZE_WIDTH,
    PolicyKey,
    ResizeSpec,
    list_policies,
    resolve,
)
from core.exceptions import UnknownPolicyError


@pytest.mark.parametrize(
    "key, quality, encoding",
    [
        ("lossy", 0.2, ImageEncoding.JPEG),
        ("lossless", 1.0, ImageEncoding.PNG),
        ("efficient", 0.2, ImageEncoding.JPEG),
    ],
)
def test_resolve_matches_policy_table(key, quality, encoding):
    policy = resolve(key)
    assert policy.key is PolicyKey(key)
    assert policy.quality == quality
    assert policy.encoding is encoding


def test_resolve_accepts_enum_and_normalizes_strings():
    assert resolve(PolicyKey.EFFICIENT) is resolve(" Efficient ")


@pytest.mark.parametrize("key", ["", "webp", None, 3])
def test_resolve_rejects_unknown_keys(key):
    with pytest.raises(UnknownPolicyError):
        resolve(key)


def test_only_efficient_resizes():
    assert resolve("lossy").resize_spec(800) is None
    assert resolve("lossless").resize_spec(800) is None


@pytest.mark.parametrize(
    "width, expected",
    [(800, 400), (801, 400), (3, 1), (None, DEFAULT_RESIZE_WIDTH), (0, DEFAULT_RESIZE_WIDTH)],
)
def test_efficient_resize_width(width, expected):
    assert resolve("efficient").resize_spec(width) == ResizeSpec(width=expected)


def test_list_policies_display_order():
    assert [p.key.value for p in list_policies()] == ["lossy", "lossless", "efficient"]
