"""
Acceptance test fixtures — real signed DER CRLs built with `cryptography`.

The anchor decoder never parses ASN.1, so these fixtures are what keeps it
honest against the byte layout an actual CA produces.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

ISSUER_CN = "Contoso CA"
THIS_UPDATE = datetime(2024, 1, 1, tzinfo=UTC)
NEXT_UPDATE = datetime(2024, 6, 1, tzinfo=UTC)


def build_crl(
    common_name: str | None = ISSUER_CN,
    this_update: datetime = THIS_UPDATE,
    next_update: datetime = NEXT_UPDATE,
    revoked_serials: tuple[int, ...] = (),
) -> bytes:
    """Sign a CRL with a throwaway P-256 key and return its DER encoding."""
    attributes = [
        x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Contoso Ltd"),
    ]
    if common_name is not None:
        attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name))

    builder = (
        x509.CertificateRevocationListBuilder()
        .issuer_name(x509.Name(attributes))
        .last_update(this_update)
        .next_update(next_update)
        .add_extension(x509.CRLNumber(1), critical=False)
    )
    for serial in revoked_serials:
        builder = builder.add_revoked_certificate(
            x509.RevokedCertificateBuilder()
            .serial_number(serial)
            .revocation_date(this_update)
            .build()
        )

    key = ec.generate_private_key(ec.SECP256R1())
    crl = builder.sign(private_key=key, algorithm=hashes.SHA256())
    return crl.public_bytes(Encoding.DER)


@pytest.fixture(scope="session")
def real_crl() -> bytes:
    return build_crl()


@pytest.fixture(scope="session")
def real_crl_with_revocations() -> bytes:
    return build_crl(revoked_serials=(1001, 1002, 1003))
