"""
Extraction of CRL distribution point URLs from X.509 certificates.

Only the ``fullName`` form of a distribution point name is taken into
account, and only URI-typed general names within it are returned.
Names relative to the CRL issuer require the issuer's name to be resolved
first, and RFC 5280 tells conforming CAs not to use them anyway.
"""

import logging
from typing import Optional, Tuple

from asn1crypto import core, x509

from .errors import MalformedExtension

__all__ = [
    'CRL_DISTRIBUTION_POINTS_OID',
    'get_crl_dp_extension_bytes',
    'parse_distribution_points',
    'extract_crl_urls',
]

logger = logging.getLogger(__name__)

CRL_DISTRIBUTION_POINTS_OID = '2.5.29.31'


def get_crl_dp_extension_bytes(cert: x509.Certificate) -> Optional[bytes]:
    """
    Look up the raw value of the CRL distribution points extension.

    :param cert:
        An asn1crypto.x509.Certificate object.
    :return:
        The DER encoding of the ``CRLDistributionPoints`` structure, i.e.
        the contents of the extension's ``extnValue`` octet string,
        or ``None`` if the certificate does not carry the extension.
    """
    extensions = cert['tbs_certificate']['extensions']
    if isinstance(extensions, core.Void):
        return None
    for ext in extensions:
        if ext['extn_id'].dotted == CRL_DISTRIBUTION_POINTS_OID:
            return ext['extn_value'].contents
    return None


def parse_distribution_points(der_bytes: bytes) -> Tuple[str, ...]:
    """
    Collect the distribution point URLs from a DER-encoded
    ``CRLDistributionPoints`` value, in the order in which they appear.

    :param der_bytes:
        The DER-encoded extension value.
    :raises MalformedExtension:
        if the value can't be decoded as a sequence of distribution points.
    :return:
        A tuple of URL strings.
    """
    try:
        dps = x509.CRLDistributionPoints.load(der_bytes, strict=True)
        return tuple(_collect_urls(dps))
    except (ValueError, TypeError) as e:
        raise MalformedExtension(
            "Failed to decode CRL distribution points extension"
        ) from e


def _collect_urls(dps: x509.CRLDistributionPoints):
    for ix, distribution_point in enumerate(dps):
        dp_name = distribution_point['distribution_point']
        if isinstance(dp_name, core.Void):
            logger.debug(f"Distribution point {ix} has no name, skipping")
            continue
        if dp_name.name != 'full_name':
            logger.debug(
                f"Distribution point {ix} uses a name relative to the CRL "
                f"issuer, skipping"
            )
            continue
        for general_name in dp_name.chosen:
            if general_name.name == 'uniform_resource_identifier':
                yield general_name.native
            else:
                logger.debug(
                    f"Skipping general name of type '{general_name.name}' "
                    f"in distribution point {ix}"
                )


def extract_crl_urls(cert: x509.Certificate) -> Tuple[str, ...]:
    """
    Extract all CRL distribution point URLs from a certificate.

    :param cert:
        An asn1crypto.x509.Certificate object.
    :raises MalformedExtension:
        if the certificate has a CRL distribution points extension that
        cannot be decoded.
    :return:
        A (possibly empty) tuple of URLs, in document order. Certificates
        without the extension yield an empty tuple.
    """
    try:
        ext_bytes = get_crl_dp_extension_bytes(cert)
    except (ValueError, TypeError) as e:
        raise MalformedExtension(
            "Failed to read extensions of certificate"
        ) from e
    if ext_bytes is None:
        return ()
    return parse_distribution_points(ext_bytes)
