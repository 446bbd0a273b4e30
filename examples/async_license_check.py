import asyncio
import contextlib
import os
import sys

# Add src to path for running directly
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from anyio import create_task_group
from authlib.jose import JsonWebKey
from pydantic import SecretStr

from coreason_license.config import CoreasonLicenseConfig
from coreason_license.guard import LicenseGuard
from coreason_license.issuer import IssuerNames, LicenseIssuer
from coreason_license.models import LicenseRecord
from coreason_license.records import InMemoryLicenseSource, extract_license_summary, license_identifier
from coreason_license.validator import LicenseValidatorAsync


async def main() -> None:
    """
    Demonstrates offline license issuance and validation.
    Includes:
    - Issuing a license with a freshly generated RSA key
    - TaskGroup running several async validations concurrently
    - LicenseGuard looking up the stored record before validating
    """
    print(">>> Starting offline license example")

    config = CoreasonLicenseConfig(pii_salt=SecretStr("super-secret-salt-for-pii-hashing"))

    signing_key = JsonWebKey.generate_key("RSA", 2048, is_private=True)
    public_pem = signing_key.as_pem(is_private=False).decode("ascii")
    issuer = LicenseIssuer(signing_key.as_pem(is_private=True).decode("ascii"), key_id="example-1", config=config)

    token = issuer.issue(
        "contoso",
        "crm-addon",
        "customer-42",
        ["dataverse:org-prod:Production", "dataverse:org-test:Test"],
        expires_in_days=365,
        names=IssuerNames(publisher="Contoso", product="CRM Add-on", subject="Fabrikam"),
    )
    summary = extract_license_summary(token)
    print(f">>> Issued '{summary.name}', expires {summary.expiry_date}")

    validator = LicenseValidatorAsync(config=config)

    async def check(environment: str) -> None:
        result = await validator.validate(token, "contoso", "crm-addon", "dataverse", environment, [public_pem])
        if result.is_valid:
            print(f"    - {environment}: valid")
        else:
            print(f"    - {environment}: {result.reason} (terminal={result.terminal})")

    print(">>> Validating for several environments concurrently...")
    async with create_task_group() as tg:
        for environment in ("org-prod", "{ORG-TEST}", "org-dev"):
            tg.start_soon(check, environment)

    source = InMemoryLicenseSource(
        [LicenseRecord(license_id="1", identifier=license_identifier("contoso", "crm-addon"), key=token)]
    )
    guarded = LicenseGuard(source).check("contoso", "crm-addon", "dataverse", "org-prod", [public_pem])
    print(f">>> Guard result: valid={guarded.is_valid}, record={guarded.record.license_id if guarded.record else None}")


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())
