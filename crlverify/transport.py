import enum
from typing import Optional

from asn1crypto import crl, pem

from .config import CRLCheckConfig
from .errors import DecodeError, TransportError, UnsupportedScheme
from .fetchers.api import (
    CRL_LDAP_ATTRIBUTE,
    ByteStreamFetcher,
    DirectoryFetcher,
)
from .fetchers.ldap3_fetchers import Ldap3DirectoryFetcher
from .fetchers.requests_fetchers import RequestsWebFetcher

__all__ = ['CRLScheme', 'CRLTransport', 'decode_crl']


@enum.unique
class CRLScheme(enum.Enum):
    """
    URL schemes from which CRLs can be retrieved.
    """

    HTTP = 'http'
    HTTPS = 'https'
    FTP = 'ftp'
    LDAP = 'ldap'

    @property
    def is_web(self) -> bool:
        return self is not CRLScheme.LDAP

    @classmethod
    def classify(cls, url: str) -> 'CRLScheme':
        """
        Determine the scheme of a distribution point URL.

        :raises UnsupportedScheme:
            if the URL does not use one of the supported schemes.
        """
        lowered = url.lower()
        for scheme in cls:
            if lowered.startswith(scheme.value + '://'):
                return scheme
        raise UnsupportedScheme(
            f"Can not download CRL from distribution point {url}: "
            f"unsupported URL scheme",
            url=url,
        )


def decode_crl(data: bytes, url: Optional[str] = None) -> crl.CertificateList:
    """
    Decode a DER- or PEM-encoded CRL.

    :raises DecodeError:
        if the data is not a well-formed CRL.
    """
    try:
        if pem.detect(data):
            _, _, data = pem.unarmor(data)
        certificate_list = crl.CertificateList.load(data, strict=True)
        # asn1crypto parses lazily, force a full parse here
        certificate_list.native
    except (ValueError, TypeError) as e:
        raise DecodeError(
            f"Data retrieved from {url} is not a valid CRL", url=url
        ) from e
    return certificate_list


class CRLTransport:
    """
    Retrieves CRLs from distribution point URLs.

    HTTP(S) and FTP URLs are handed to the web fetcher, LDAP URLs to
    the directory fetcher. Other schemes are rejected without any attempt
    at retrieval.

    :param web_fetcher:
        Fetcher for ``http``, ``https`` and ``ftp`` URLs.
    :param directory_fetcher:
        Fetcher for ``ldap`` URLs.
    """

    def __init__(
        self,
        web_fetcher: Optional[ByteStreamFetcher] = None,
        directory_fetcher: Optional[DirectoryFetcher] = None,
    ):
        self.web_fetcher = web_fetcher or RequestsWebFetcher()
        self.directory_fetcher = directory_fetcher or Ldap3DirectoryFetcher()

    @classmethod
    def from_config(cls, config: CRLCheckConfig) -> 'CRLTransport':
        return cls(
            web_fetcher=RequestsWebFetcher(
                user_agent=config.user_agent,
                per_request_timeout=config.per_request_timeout,
            ),
            directory_fetcher=Ldap3DirectoryFetcher(
                per_request_timeout=config.per_request_timeout
            ),
        )

    def fetch(self, url: str) -> crl.CertificateList:
        """
        Retrieve and decode the CRL at the given URL.

        :raises UnsupportedScheme:
            if the URL scheme is not supported.
        :raises TransportError:
            if the CRL could not be retrieved.
        :raises DecodeError:
            if the retrieved data is not a valid CRL.
        """
        scheme = CRLScheme.classify(url)
        try:
            if scheme.is_web:
                data = self.web_fetcher.fetch_bytes(url)
            else:
                data = self.directory_fetcher.fetch_attribute(
                    url, CRL_LDAP_ATTRIBUTE
                )
        except OSError as e:
            # socket-level errors (incl. timeouts) from custom fetchers
            raise TransportError(
                f"Failure to fetch CRL from URL {url}", url=url
            ) from e
        if not scheme.is_web and not data:
            raise TransportError(
                f"Can not download CRL from {url}: attribute "
                f"{CRL_LDAP_ATTRIBUTE} is missing or empty",
                url=url,
            )
        return decode_crl(data, url=url)
