"""
Revocation status of a certificate at a reference time, as established
by a CRL retrieved from one of the certificate's distribution points.

The CRL must be signed by one of the caller's trust anchors: its signature
is always verified before any of its entries are looked at.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Union

from asn1crypto import core, crl, x509
from cryptography.exceptions import InvalidSignature

from .config import CRLCheckConfig
from .distribution_points import extract_crl_urls
from .errors import (
    CRLFetchError,
    IssuerNotTrusted,
    NoDistributionPoints,
    PSSParameterMismatch,
    SignatureInvalid,
    VerificationFailure,
)
from .transport import CRLTransport
from .trust import TrustAnchorSet
from .util import as_utc, validate_sig

__all__ = [
    'Verdict',
    'NotRevoked',
    'Revoked',
    'RevokedAfterReference',
    'RevocationEvaluator',
    'check_revocation',
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    """
    Outcome of a successful CRL check.
    """

    url: str
    """
    Distribution point URL of the CRL that the verdict is based on.
    """

    @property
    def revoked(self) -> bool:
        """
        Whether the certificate is to be considered revoked at the
        reference time.
        """
        return False


@dataclass(frozen=True)
class NotRevoked(Verdict):
    """
    The certificate does not appear on the CRL.
    """
    pass


@dataclass(frozen=True)
class Revoked(Verdict):
    """
    The certificate was revoked at or before the reference time.
    """

    revocation_date: datetime
    reason: str = 'Unspecified'

    @property
    def revoked(self) -> bool:
        return True


@dataclass(frozen=True)
class RevokedAfterReference(Verdict):
    """
    The certificate appears on the CRL, but was only revoked after the
    reference time, so it was still valid at that point.
    """

    revocation_date: datetime
    reason: str = 'Unspecified'


class RevocationEvaluator:
    """
    Checks certificates against the CRLs published at their distribution
    points.

    Distribution points are tried in the order in which they appear in the
    certificate, and the first CRL that can be retrieved settles the matter.
    URLs in a distribution point are alternative ways to obtain the same CRL
    (see RFC 5280, section 4.2.1.13), so there is no point in consulting
    any others afterwards.

    :param transport:
        The transport used to retrieve CRLs. If not specified, a transport
        with default settings is used.
    :param continue_on_fetch_failure:
        If ``True``, move on to the next URL when a CRL can't be retrieved
        or decoded. By default, such failures are final.
        Failures to authenticate a CRL are always final.
    """

    def __init__(
        self,
        transport: Optional[CRLTransport] = None,
        *,
        continue_on_fetch_failure: bool = False,
    ):
        self.transport = transport or CRLTransport()
        self.continue_on_fetch_failure = continue_on_fetch_failure

    @classmethod
    def from_config(
        cls,
        config: CRLCheckConfig,
        transport: Optional[CRLTransport] = None,
    ) -> 'RevocationEvaluator':
        return cls(
            transport=transport or CRLTransport.from_config(config),
            continue_on_fetch_failure=config.continue_on_fetch_failure,
        )

    def evaluate(
        self,
        cert: x509.Certificate,
        reference_time: datetime,
        trust_anchors: Union[TrustAnchorSet, Iterable[x509.Certificate]],
    ) -> Verdict:
        """
        Determine whether a certificate had been revoked at the reference
        time.

        :param cert:
            The certificate to check.
        :param reference_time:
            The time at which the certificate's status is of interest,
            e.g. the time at which a signature was made. Naive datetimes
            are taken to be in UTC.
        :param trust_anchors:
            Certificates trusted to sign CRLs.
        :raises MalformedExtension:
            if the certificate's CRL distribution points can't be read.
        :raises NoDistributionPoints:
            if the certificate doesn't reference any CRLs.
        :raises IssuerNotTrusted:
            if the CRL issuer is not among the trust anchors.
        :raises SignatureInvalid:
            if the CRL's signature does not validate.
        :raises VerificationFailure:
            if no CRL could be obtained.
        :return:
            A :class:`Verdict`.
        """
        if not isinstance(trust_anchors, TrustAnchorSet):
            trust_anchors = TrustAnchorSet(trust_anchors)
        reference_time = as_utc(reference_time)
        subject = cert.subject.human_friendly

        urls = extract_crl_urls(cert)
        if not urls:
            raise NoDistributionPoints(
                f"Certificate for {subject} does not specify any CRL "
                f"distribution points"
            )

        last_error: Optional[CRLFetchError] = None
        for url in urls:
            logger.info(f"Checking distribution point URL: {url}")
            try:
                certificate_list = self.transport.fetch(url)
            except CRLFetchError as e:
                if not self.continue_on_fetch_failure:
                    raise VerificationFailure(
                        f"Cannot verify CRL for certificate {subject}: {e}",
                        url=url,
                    ) from e
                logger.warning(
                    f"Failed to retrieve CRL from {url}, trying next "
                    f"distribution point... (Error: {e})"
                )
                last_error = e
                continue

            issuer_cert = self._find_crl_issuer(
                certificate_list, trust_anchors, url
            )
            _verify_crl_signature(
                certificate_list, issuer_cert.public_key, url
            )
            return _decide(cert, certificate_list, reference_time, url)

        raise VerificationFailure(
            f"Cannot verify CRL for certificate {subject}: none of its "
            f"distribution points yielded a CRL",
            url=last_error.url if last_error is not None else None,
        ) from last_error

    @staticmethod
    def _find_crl_issuer(
        certificate_list: crl.CertificateList,
        trust_anchors: TrustAnchorSet,
        url: str,
    ) -> x509.Certificate:
        crl_issuer = certificate_list.issuer
        issuer_cert = trust_anchors.find_issuer(crl_issuer)
        if issuer_cert is None:
            raise IssuerNotTrusted(
                f"Certificate for {crl_issuer.human_friendly} not found among "
                f"the trust anchors, so the CRL at {url} could not be "
                f"verified",
                issuer=crl_issuer,
                url=url,
            )
        return issuer_cert


def _verify_crl_signature(
    certificate_list: crl.CertificateList, public_key, url: str
):
    """
    Verifies the digital signature on an asn1crypto.crl.CertificateList
    object.

    :raises SignatureInvalid:
        when the signature is invalid or uses an unsupported algorithm
    """
    sig_algo_info = certificate_list['signature_algorithm']
    try:
        sig_algo = sig_algo_info.signature_algo
        hash_algo = sig_algo_info.hash_algo
    except (ValueError, TypeError, KeyError) as e:
        raise SignatureInvalid(
            f"Unreadable signature algorithm on the CRL at {url}", url=url
        ) from e
    try:
        validate_sig(
            signature=certificate_list['signature'].native,
            signed_data=certificate_list['tbs_cert_list'].dump(),
            public_key_info=public_key,
            sig_algo=sig_algo,
            hash_algo=hash_algo,
            parameters=sig_algo_info['parameters'],
        )
    except PSSParameterMismatch as e:
        raise SignatureInvalid(
            f"Invalid signature parameters on the CRL at {url}", url=url
        ) from e
    except InvalidSignature as e:
        raise SignatureInvalid(
            f"Unable to verify the signature of the CRL at {url}", url=url
        ) from e
    except (ValueError, NotImplementedError) as e:
        raise SignatureInvalid(
            f"Unsupported signature mechanism on the CRL at {url}", url=url
        ) from e


def _find_cert_in_list(
    cert: x509.Certificate, certificate_list: crl.CertificateList
) -> Optional[crl.RevokedCertificate]:
    """
    Look for a certificate among the revoked entries of a CRL.

    Entries of indirect CRLs may carry a certificate issuer extension, which
    applies to all subsequent entries until the next one that has it.
    """
    revoked_certificates = certificate_list['tbs_cert_list'][
        'revoked_certificates'
    ]
    if isinstance(revoked_certificates, core.Void):
        return None
    cert_serial = cert.serial_number
    issuer_name = cert.issuer

    last_issuer_name = certificate_list.issuer
    for revoked_cert in revoked_certificates:
        if (
            revoked_cert.issuer_name
            and revoked_cert.issuer_name != last_issuer_name
        ):
            last_issuer_name = revoked_cert.issuer_name
        if last_issuer_name != issuer_name:
            continue
        if revoked_cert['user_certificate'].native == cert_serial:
            return revoked_cert
    return None


def _decide(
    cert: x509.Certificate,
    certificate_list: crl.CertificateList,
    reference_time: datetime,
    url: str,
) -> Verdict:
    revoked_cert = _find_cert_in_list(cert, certificate_list)
    if revoked_cert is None:
        logger.info(f"The certificate was not revoked by CRL {url}")
        return NotRevoked(url=url)

    revocation_date = revoked_cert['revocation_date'].native
    reason_value = revoked_cert.crl_reason_value
    reason = (
        reason_value.human_friendly
        if reason_value is not None
        else crl.CRLReason('unspecified').human_friendly
    )
    if revocation_date <= reference_time:
        logger.info(
            f"The certificate was revoked by CRL {url} on {revocation_date}"
        )
        return Revoked(
            url=url, revocation_date=revocation_date, reason=reason
        )
    logger.info(
        f"The certificate was revoked after the reference time by CRL {url} "
        f"on {revocation_date}"
    )
    return RevokedAfterReference(
        url=url, revocation_date=revocation_date, reason=reason
    )


def check_revocation(
    cert: x509.Certificate,
    reference_time: datetime,
    trust_anchors: Union[TrustAnchorSet, Iterable[x509.Certificate]],
    *,
    config: Optional[CRLCheckConfig] = None,
    transport: Optional[CRLTransport] = None,
) -> Verdict:
    """
    Convenience wrapper around :meth:`RevocationEvaluator.evaluate`.

    :param config:
        Settings to use. If ``None``, the defaults apply.
    :param transport:
        Transport to use instead of the one described by ``config``.
    """
    evaluator = RevocationEvaluator.from_config(
        config or CRLCheckConfig(), transport=transport
    )
    return evaluator.evaluate(cert, reference_time, trust_anchors)
