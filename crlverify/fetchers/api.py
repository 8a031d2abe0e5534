"""
Interfaces for the I/O primitives used to retrieve CRLs.

Both are synchronous and blocking; timeouts are the implementation's
responsibility.
"""

import abc
from typing import Optional

from ..version import __version__

__all__ = [
    'ByteStreamFetcher',
    'DirectoryFetcher',
    'DEFAULT_USER_AGENT',
    'CRL_LDAP_ATTRIBUTE',
]

DEFAULT_USER_AGENT = 'crlverify %s' % __version__

CRL_LDAP_ATTRIBUTE = 'certificateRevocationList;binary'


class ByteStreamFetcher(abc.ABC):
    """Retrieves the full payload behind an HTTP(S) or FTP URL."""

    def fetch_bytes(self, url: str) -> bytes:
        """
        Read the resource at the given URL in its entirety.

        :param url:
            An ``http``, ``https`` or ``ftp`` URL.
        :raises:
            TransportError - when a network/protocol error occurs, including
            timeouts.
        :return:
            The payload as a ``bytes`` object.
        """
        raise NotImplementedError


class DirectoryFetcher(abc.ABC):
    """Retrieves binary attributes from directory entries over LDAP."""

    def fetch_attribute(self, url: str, attribute: str) -> Optional[bytes]:
        """
        Read a single binary attribute value from the entry addressed by
        an LDAP URL.

        :param url:
            An ``ldap`` URL, e.g. ``ldap://ldap.example.com/dc=example,dc=com``.
        :param attribute:
            Name of the attribute to retrieve.
        :raises:
            TransportError - when the directory can't be reached or the
            query fails.
        :return:
            The attribute value, or ``None`` if the entry or the attribute
            does not exist.
        """
        raise NotImplementedError
