from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Union

from asn1crypto import x509
from cryptography import x509 as cx509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtensionOID, NameOID

from crlverify.errors import TransportError
from crlverify.fetchers import ByteStreamFetcher, DirectoryFetcher

NOT_BEFORE = datetime(2020, 1, 1, tzinfo=timezone.utc)
NOT_AFTER = datetime(2030, 1, 1, tzinfo=timezone.utc)
CRL_ISSUED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_name(common_name) -> cx509.Name:
    return cx509.Name(
        [
            cx509.NameAttribute(NameOID.ORGANIZATION_NAME, 'crlverify tests'),
            cx509.NameAttribute(NameOID.COMMON_NAME, common_name),
        ]
    )


def to_asn1(cert: cx509.Certificate) -> x509.Certificate:
    return x509.Certificate.load(cert.public_bytes(serialization.Encoding.DER))


@dataclass
class DummyCA:
    name: cx509.Name
    key: ec.EllipticCurvePrivateKey
    cert: cx509.Certificate

    @property
    def asn1_cert(self) -> x509.Certificate:
        return to_asn1(self.cert)


def make_ca(common_name='Test Root CA', key=None) -> DummyCA:
    key = key or ec.generate_private_key(ec.SECP256R1())
    name = make_name(common_name)
    cert = (
        cx509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(cx509.random_serial_number())
        .not_valid_before(NOT_BEFORE)
        .not_valid_after(NOT_AFTER)
        .add_extension(
            cx509.BasicConstraints(ca=True, path_length=None), critical=True
        )
        .sign(key, hashes.SHA256())
    )
    return DummyCA(name=name, key=key, cert=cert)


def uri_dp(*urls) -> cx509.DistributionPoint:
    return cx509.DistributionPoint(
        full_name=[cx509.UniformResourceIdentifier(url) for url in urls],
        relative_name=None,
        reasons=None,
        crl_issuer=None,
    )


def issue_cert(
    ca: DummyCA,
    common_name='Alice',
    *,
    serial_number=0x1001,
    dps=None,
    raw_dp_extension: Optional[bytes] = None,
) -> x509.Certificate:
    key = ec.generate_private_key(ec.SECP256R1())
    builder = (
        cx509.CertificateBuilder()
        .subject_name(make_name(common_name))
        .issuer_name(ca.name)
        .public_key(key.public_key())
        .serial_number(serial_number)
        .not_valid_before(NOT_BEFORE)
        .not_valid_after(NOT_AFTER)
    )
    if dps is not None:
        builder = builder.add_extension(
            cx509.CRLDistributionPoints(dps), critical=False
        )
    if raw_dp_extension is not None:
        builder = builder.add_extension(
            cx509.UnrecognizedExtension(
                ExtensionOID.CRL_DISTRIBUTION_POINTS, raw_dp_extension
            ),
            critical=False,
        )
    return to_asn1(builder.sign(ca.key, hashes.SHA256()))


def make_crl(
    ca: DummyCA,
    revoked=(),
    *,
    signing_key=None,
    pem=False,
) -> bytes:
    """
    Produce a CRL issued by the given CA.

    :param revoked:
        Iterable of ``(serial, revocation_date)`` or
        ``(serial, revocation_date, reason_flag)`` tuples.
    :param signing_key:
        Key to sign with instead of the CA's own key.
    """
    builder = (
        cx509.CertificateRevocationListBuilder()
        .issuer_name(ca.name)
        .last_update(CRL_ISSUED_AT)
        .next_update(CRL_ISSUED_AT + timedelta(days=3650))
    )
    for entry in revoked:
        serial, revocation_date, *rest = entry
        entry_builder = (
            cx509.RevokedCertificateBuilder()
            .serial_number(serial)
            .revocation_date(revocation_date)
        )
        if rest:
            entry_builder = entry_builder.add_extension(
                cx509.CRLReason(rest[0]), critical=False
            )
        builder = builder.add_revoked_certificate(entry_builder.build())
    crl = builder.sign(signing_key or ca.key, hashes.SHA256())
    encoding = serialization.Encoding.PEM if pem else serialization.Encoding.DER
    return crl.public_bytes(encoding)


Payload = Union[bytes, None, Exception]


class DictWebFetcher(ByteStreamFetcher):
    """Serves CRLs from memory, and keeps track of what was requested."""

    def __init__(self, payloads: Dict[str, Payload]):
        self.payloads = payloads
        self.requested = []

    def fetch_bytes(self, url: str) -> bytes:
        self.requested.append(url)
        try:
            payload = self.payloads[url]
        except KeyError:
            raise TransportError(f"No route to {url}", url=url)
        if isinstance(payload, Exception):
            raise payload
        return payload


class DictDirectoryFetcher(DirectoryFetcher):
    def __init__(self, payloads: Dict[str, Payload]):
        self.payloads = payloads
        self.requested = []

    def fetch_attribute(self, url: str, attribute: str) -> Optional[bytes]:
        self.requested.append((url, attribute))
        payload = self.payloads.get(url)
        if isinstance(payload, Exception):
            raise payload
        return payload
