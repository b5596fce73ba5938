import pytest

from apptargets.details.defaults import (
    DEFAULTS,
    ActivationRule,
    TargetType,
    lookup_defaults,
    parse_target_type,
)
from apptargets.errors import ConfigurationError
from apptargets.generators.xcode.model import ProductType


def test_every_type_has_defaults():
    assert len(TargetType) == 20
    for target_type in TargetType:
        defaults = lookup_defaults(target_type)
        assert defaults is DEFAULTS[target_type]
        assert defaults.minimum_deployment_target
        assert defaults.bundle_identifier_suffix
        assert isinstance(defaults.product_type, ProductType)


def test_share_defaults():
    defaults = lookup_defaults(TargetType.SHARE)
    assert defaults.minimum_deployment_target == "8.0"
    assert defaults.bundle_identifier_suffix == "share"
    assert defaults.extension_point == "com.apple.share-services"
    assert ActivationRule("text") in defaults.default_activation_rules


def test_sticker_pack_has_no_code():
    defaults = lookup_defaults(TargetType.STICKERS)
    assert not defaults.requires_code
    assert defaults.product_type == ProductType.MESSAGES_STICKER_PACK


def test_clip_is_an_application():
    defaults = lookup_defaults(TargetType.CLIP)
    assert defaults.wrapper_extension == "app"
    assert defaults.supports_entry


def test_parse_target_type():
    assert parse_target_type("notification-content") == TargetType.NOTIFICATION_CONTENT
    assert parse_target_type(TargetType.WATCH) == TargetType.WATCH


@pytest.mark.parametrize("value", ["widgets", "", None, 3])
def test_parse_unknown_target_type(value):
    with pytest.raises(ConfigurationError):
        parse_target_type(value)


def test_activation_rule_validation():
    with pytest.raises(ConfigurationError):
        ActivationRule("audio")
    with pytest.raises(ConfigurationError):
        ActivationRule("image", 0)
    rule = ActivationRule.parse({"type": "url", "maxCount": 3})
    assert rule.as_literal() == {"type": "url", "maxCount": 3}


@pytest.mark.parametrize(
    "value",
    [
        {"type": "image", "maxCount": "many"},
        {"type": "image", "maxCount": None},
        {"type": ["image"]},
        "image",
    ],
)
def test_activation_rule_parse_rejects_malformed_rules(value):
    with pytest.raises(ConfigurationError):
        ActivationRule.parse(value)
