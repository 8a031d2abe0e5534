from .api import (
    CRL_LDAP_ATTRIBUTE,
    DEFAULT_USER_AGENT,
    ByteStreamFetcher,
    DirectoryFetcher,
)
from .ldap3_fetchers import Ldap3DirectoryFetcher
from .requests_fetchers import RequestsWebFetcher

__all__ = [
    'ByteStreamFetcher',
    'DirectoryFetcher',
    'RequestsWebFetcher',
    'Ldap3DirectoryFetcher',
    'DEFAULT_USER_AGENT',
    'CRL_LDAP_ATTRIBUTE',
]
