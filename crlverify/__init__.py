"""
Revocation checking of X.509 certificates against CRLs, at a given
reference time.
"""

from .config import CRLCheckConfig, ConfigurationError, load_config
from .distribution_points import extract_crl_urls
from .errors import (
    CRLCheckError,
    CRLFetchError,
    DecodeError,
    IssuerNotTrusted,
    MalformedExtension,
    NoDistributionPoints,
    SignatureInvalid,
    TransportError,
    UnsupportedScheme,
    VerificationFailure,
)
from .evaluate import (
    NotRevoked,
    RevocationEvaluator,
    Revoked,
    RevokedAfterReference,
    Verdict,
    check_revocation,
)
from .transport import CRLScheme, CRLTransport
from .trust import TrustAnchorSet
from .version import __version__, __version_info__

__all__ = [
    '__version__',
    '__version_info__',
    'check_revocation',
    'extract_crl_urls',
    'load_config',
    'CRLCheckConfig',
    'CRLScheme',
    'CRLTransport',
    'RevocationEvaluator',
    'TrustAnchorSet',
    'Verdict',
    'NotRevoked',
    'Revoked',
    'RevokedAfterReference',
    'ConfigurationError',
    'CRLCheckError',
    'MalformedExtension',
    'CRLFetchError',
    'TransportError',
    'DecodeError',
    'UnsupportedScheme',
    'VerificationFailure',
    'NoDistributionPoints',
    'IssuerNotTrusted',
    'SignatureInvalid',
]
