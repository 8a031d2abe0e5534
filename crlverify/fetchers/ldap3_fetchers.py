"""
Directory fetcher backed by ``ldap3``.

The distinguished name in the path of the LDAP URL addresses the entry
holding the CRL; it is read with a base-scope search over an anonymous bind.
"""

import logging
from typing import Optional
from urllib.parse import unquote, urlsplit

from ldap3 import BASE, NONE, Connection, Server
from ldap3.core.exceptions import LDAPException

from ..errors import TransportError
from .api import DirectoryFetcher

__all__ = ['Ldap3DirectoryFetcher']

logger = logging.getLogger(__name__)


class Ldap3DirectoryFetcher(DirectoryFetcher):
    def __init__(self, per_request_timeout=10):
        self.per_request_timeout = per_request_timeout

    def fetch_attribute(self, url: str, attribute: str) -> Optional[bytes]:
        try:
            parts = urlsplit(url)
            host, port = parts.hostname, parts.port
        except ValueError as e:
            raise TransportError(f"Invalid LDAP URL {url}", url=url) from e
        if not host:
            raise TransportError(f"No LDAP server given in {url}", url=url)
        base_dn = unquote(parts.path.lstrip('/'))
        logger.info(
            f"Querying attribute {attribute} of '{base_dn}' on {host}..."
        )
        try:
            server = Server(
                host,
                port=port,
                get_info=NONE,
                connect_timeout=self.per_request_timeout,
            )
            conn = Connection(
                server,
                auto_bind=True,
                read_only=True,
                receive_timeout=self.per_request_timeout,
            )
            try:
                found = conn.search(
                    base_dn,
                    '(objectClass=*)',
                    search_scope=BASE,
                    attributes=[attribute],
                )
                result = None
                if found:
                    result = _first_value(conn.response, attribute)
            finally:
                _unbind_quietly(conn, url)
            return result
        except LDAPException as e:
            raise TransportError(
                f"LDAP query to {url} failed", url=url
            ) from e


def _unbind_quietly(conn, url):
    try:
        conn.unbind()
    except LDAPException as e:
        logger.warning(f"Failed to unbind from LDAP server for {url}: {e}")


def _first_value(response, attribute) -> Optional[bytes]:
    wanted = attribute.lower()
    for entry in response or ():
        if entry.get('type') != 'searchResEntry':
            continue
        raw_attributes = entry.get('raw_attributes') or {}
        for name, values in raw_attributes.items():
            if name.lower() != wanted:
                continue
            if isinstance(values, (bytes, bytearray)):
                return bytes(values)
            return bytes(values[0]) if values else None
    return None
