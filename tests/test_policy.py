import pytest

from hcw_assistant.core.config import settings
from hcw_assistant.core.errors import ConfigError
from hcw_assistant.services.policy.loader import load_policy_from_file
from hcw_assistant.services.policy.registry import PolicyRegistry


def test_bundled_policy_loads():
    policy = load_policy_from_file(settings.ASSISTANT_POLICY_PATH)

    assert policy.meta.policy_id == "hcw_staff_assistant"
    assert policy.meta.currency_symbol == "₹"
    assert policy.limits.orders == 2000
    assert policy.stock.low == 10
    assert "vs" in policy.keywords.comparison
    assert "chartSpec" in policy.prompt.system_instructions


def test_missing_policy_file(tmp_path):
    with pytest.raises(ConfigError):
        load_policy_from_file(str(tmp_path / "nope.yaml"))


def test_policy_must_be_a_mapping(tmp_path):
    p = tmp_path / "bad.yaml"
    p.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_policy_from_file(str(p))


def test_partial_policy_keeps_defaults(tmp_path):
    p = tmp_path / "small.yaml"
    p.write_text("meta:\n  version: v2\nstock:\n  low: 5\n", encoding="utf-8")
    policy = load_policy_from_file(str(p))

    assert policy.meta.version == "v2"
    assert policy.stock.low == 5
    assert policy.stock.medium == 50
    assert policy.limits.orders == 2000


def test_registry_round_trip():
    policy = load_policy_from_file(settings.ASSISTANT_POLICY_PATH)
    PolicyRegistry.load(policy)
    assert PolicyRegistry.get() is policy
    assert PolicyRegistry.get_or_default() is policy
