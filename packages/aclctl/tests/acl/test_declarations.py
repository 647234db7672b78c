from __future__ import annotations

import pytest

from aclctl.acl.declarations import (
    Rejection,
    is_alias,
    is_capability_path,
    parse_capability,
    parse_import,
    parse_operation,
    parse_requires,
    parse_target,
)
from aclctl.acl.model import AdapterTarget, CapabilityBinding, FeatureTarget, ImportDeclaration, OperationEntry, RequireDeclaration


def test_parse_import() -> None:
    assert parse_import("acme.users.Contract AS Users") == ImportDeclaration("acme.users.Contract", "Users")
    assert isinstance(parse_import("acme.users.Contract Users"), Rejection)


def test_parse_requires_keeps_lowercase_alias_for_later_checks() -> None:
    decl = parse_requires("acme.payments.Gateway@^1.0 AS payments")
    assert decl == RequireDeclaration("acme.payments.Gateway", "^1.0", "payments")
    assert not is_alias(decl.alias)
    assert str(decl) == "acme.payments.Gateway@^1.0 AS payments"


@pytest.mark.parametrize("entry", ["acme.payments.Gateway AS P", "acme.payments.Gateway@^1.0", "@^1 AS P"])
def test_parse_requires_rejects_bad_shapes(entry: str) -> None:
    result = parse_requires(entry)
    assert isinstance(result, Rejection)
    assert result.entry == entry


def test_parse_capability() -> None:
    assert parse_capability("CAPABILITY acme.pay.Gateway@~1.2 AS Pay") == CapabilityBinding("acme.pay.Gateway", "~1.2", "Pay")
    assert isinstance(parse_capability("CAPABILITY acme.pay.Gateway AS Pay"), Rejection)


def test_parse_target_variants() -> None:
    assert parse_target("TO FEATURE stripe.payments.Contract@^3.0") == FeatureTarget("stripe.payments.Contract", "^3.0")
    assert parse_target("TO ADAPTER adapters/stripe-v3") == AdapterTarget("adapters/stripe-v3")
    assert str(AdapterTarget("x")) == "ADAPTER x"
    assert isinstance(parse_target("TO ADAPTER has spaces"), Rejection)
    assert isinstance(parse_target("TO SOMETHING"), Rejection)


def test_parse_operation() -> None:
    assert parse_operation("Pay.capture_all -> Stripe.capture") == OperationEntry("capture_all", "Pay", "Stripe.capture")
    assert isinstance(parse_operation("pay.capture -> x"), Rejection)
    assert isinstance(parse_operation("Pay.capture ->"), Rejection)


@pytest.mark.parametrize(
    ("path", "ok"),
    [
        ("acme.payments.Gateway", True),
        ("acme.Gateway", True),
        ("acme", False),
        ("Acme.payments", False),
        ("acme..Gateway", False),
        ("acme.9lives", False),
    ],
)
def test_capability_path_pattern(path: str, ok: bool) -> None:
    assert is_capability_path(path) is ok
