from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[3]
SRC = ROOT / "packages/aclctl/src"

BILLING_CONTRACT = """\
:::ACL_METADATA
DOMAIN: acme.billing
CONTEXT: Contract
VERSION: 1.2.0
REQUIRES:
  - acme.payments.Gateway@^1.0 AS Payments
:::

FLOW Charge
  CALL Payments.authorize
  CALL Payments.capture
"""

PAYMENTS_MAPPING = """\
:::ACL_METADATA
DOMAIN: acme.billing
CONTEXT: Mapping
VERSION: 1.0.0
:::

MAPPING PaymentsGateway {
  CAPABILITY acme.payments.Gateway@^1.2 AS Payments
  TO FEATURE stripe.payments.Contract@^3.0
  OPERATION MAP:
    - Payments.authorize -> Stripe.createIntent
    - Payments.capture -> Stripe.captureIntent
}
"""

REGISTRY_YAML = """\
features:
  - name: acme.billing
    description: Billing contracts for the acme platform
    author: Acme Platform Team
    domain: acme.dev
    url: https://acme.dev/acl/billing.contract.acl
    tags: [billing, payments]
    maturity: stable
    submitted: 2024-03-01
"""


def metadata(domain: str = "acme.billing", context: str = "Contract", version: str = "1.0.0", extra: str = "") -> str:
    return f":::ACL_METADATA\nDOMAIN: {domain}\nCONTEXT: {context}\nVERSION: {version}\n{extra}:::\n"


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def write_repo(repo: Path) -> Path:
    """A minimal valid repository: one contract, one mapping, one registry record."""
    (repo / ".git").mkdir(parents=True, exist_ok=True)
    write(repo / "features/billing/billing.contract.acl", BILLING_CONTRACT)
    write(repo / "acl/mappings/payments.map.acl", PAYMENTS_MAPPING)
    write(repo / "registry.yaml", REGISTRY_YAML)
    return repo


def run_aclctl(*args: str, cwd: Path | None = None, env: dict[str, str] | None = None) -> subprocess.CompletedProcess[str]:
    merged = os.environ.copy()
    merged["PYTHONPATH"] = str(SRC)
    merged.setdefault("RUN_ID", "pytest-run")
    for name in list(merged):
        if name.startswith("ACLCTL_"):
            del merged[name]
    merged.update(env or {})
    return subprocess.run(
        [sys.executable, "-m", "aclctl.cli", *args],
        cwd=(cwd or ROOT),
        env=merged,
        text=True,
        capture_output=True,
        check=False,
    )
