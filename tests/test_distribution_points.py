import pytest
from cryptography import x509 as cx509
from cryptography.x509.oid import NameOID

from crlverify.distribution_points import (
    extract_crl_urls,
    get_crl_dp_extension_bytes,
    parse_distribution_points,
)
from crlverify.errors import MalformedExtension

from .common import issue_cert, make_ca, make_name, uri_dp

CA = make_ca()


def test_no_extension():
    cert = issue_cert(CA)
    assert get_crl_dp_extension_bytes(cert) is None
    assert extract_crl_urls(cert) == ()


def test_single_url():
    cert = issue_cert(CA, dps=[uri_dp('http://crl.example.com/ca.crl')])
    assert extract_crl_urls(cert) == ('http://crl.example.com/ca.crl',)


def test_urls_in_document_order():
    cert = issue_cert(
        CA,
        dps=[
            uri_dp(
                'http://crl.example.com/ca.crl',
                'ldap://ldap.example.com/dc=example,dc=com',
            ),
            uri_dp('ftp://ftp.example.com/ca.crl'),
        ],
    )
    assert extract_crl_urls(cert) == (
        'http://crl.example.com/ca.crl',
        'ldap://ldap.example.com/dc=example,dc=com',
        'ftp://ftp.example.com/ca.crl',
    )


def test_non_uri_names_skipped():
    dp = cx509.DistributionPoint(
        full_name=[
            cx509.DirectoryName(make_name('CRL holder')),
            cx509.UniformResourceIdentifier('http://crl.example.com/a.crl'),
            cx509.DNSName('crl.example.com'),
            cx509.UniformResourceIdentifier('http://crl.example.com/b.crl'),
        ],
        relative_name=None,
        reasons=None,
        crl_issuer=None,
    )
    cert = issue_cert(CA, dps=[dp])
    assert extract_crl_urls(cert) == (
        'http://crl.example.com/a.crl',
        'http://crl.example.com/b.crl',
    )


def test_relative_and_nameless_dps_skipped():
    relative = cx509.DistributionPoint(
        full_name=None,
        relative_name=cx509.RelativeDistinguishedName(
            [cx509.NameAttribute(NameOID.COMMON_NAME, 'CRL1')]
        ),
        reasons=None,
        crl_issuer=None,
    )
    nameless = cx509.DistributionPoint(
        full_name=None,
        relative_name=None,
        reasons=None,
        crl_issuer=[cx509.DirectoryName(CA.name)],
    )
    cert = issue_cert(
        CA,
        dps=[relative, uri_dp('http://crl.example.com/ca.crl'), nameless],
    )
    assert extract_crl_urls(cert) == ('http://crl.example.com/ca.crl',)


def test_only_relative_names():
    relative = cx509.DistributionPoint(
        full_name=None,
        relative_name=cx509.RelativeDistinguishedName(
            [cx509.NameAttribute(NameOID.COMMON_NAME, 'CRL1')]
        ),
        reasons=None,
        crl_issuer=None,
    )
    cert = issue_cert(CA, dps=[relative])
    assert extract_crl_urls(cert) == ()


def test_extraction_idempotent():
    cert = issue_cert(
        CA,
        dps=[
            uri_dp('http://crl.example.com/ca.crl'),
            uri_dp('http://crl2.example.com/ca.crl'),
        ],
    )
    first = extract_crl_urls(cert)
    assert extract_crl_urls(cert) == first
    assert len(first) == 2


@pytest.mark.parametrize(
    'raw_value',
    [
        b'\x02\x01\x05',
        b'\xff\xff\xff',
        b'',
        # well-formed sequence of distribution points, with trailing garbage
        b'\x30\x00\x00\x00',
    ],
)
def test_malformed_extension_value(raw_value):
    with pytest.raises(MalformedExtension):
        parse_distribution_points(raw_value)


def test_malformed_extension_in_cert():
    cert = issue_cert(CA, raw_dp_extension=b'\x02\x01\x05')
    with pytest.raises(MalformedExtension):
        extract_crl_urls(cert)


def test_parse_raw_extension_value():
    cert = issue_cert(CA, dps=[uri_dp('http://crl.example.com/ca.crl')])
    raw = get_crl_dp_extension_bytes(cert)
    assert parse_distribution_points(raw) == (
        'http://crl.example.com/ca.crl',
    )
