# coding: utf-8
from typing import Optional

from asn1crypto import x509
from cryptography.exceptions import InvalidSignature

__all__ = [
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
    'PSSParameterMismatch',
    'DSAParametersUnavailable',
]


class CRLCheckError(Exception):
    pass


class MalformedExtension(CRLCheckError):
    pass


class CRLFetchError(CRLCheckError):
    def __init__(self, msg: str, url: Optional[str] = None):
        self.url = url
        super().__init__(msg)


class TransportError(CRLFetchError):
    pass


class DecodeError(CRLFetchError):
    pass


class UnsupportedScheme(CRLFetchError):
    pass


class VerificationFailure(CRLCheckError):
    def __init__(self, msg: str, url: Optional[str] = None):
        self.failure_msg = msg
        self.url = url
        super().__init__(msg)

    @property
    def cause(self) -> Optional[BaseException]:
        """
        The lower-level error that prevented a verdict from being reached,
        if there was one.
        """
        return self.__cause__


class NoDistributionPoints(VerificationFailure):
    pass


class IssuerNotTrusted(VerificationFailure):
    def __init__(self, msg: str, issuer: x509.Name, url: Optional[str] = None):
        self.issuer = issuer
        super().__init__(msg, url=url)


class SignatureInvalid(VerificationFailure):
    pass


class PSSParameterMismatch(InvalidSignature):
    pass


class DSAParametersUnavailable(InvalidSignature):
    # Strictly speaking such a signature isn't invalid, we just can't check
    # it. DSA parameter inheritance on CRLs is rare enough to not bother.
    pass
