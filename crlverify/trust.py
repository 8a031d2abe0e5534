from typing import Iterable, Iterator, Optional

from asn1crypto import pem, x509

__all__ = [
    'TrustAnchorSet',
    'load_certs_from_pemder',
    'load_certs_from_pemder_data',
]


def load_certs_from_pemder(cert_files):
    """
    A convenience function to load PEM/DER-encoded certificates from files.

    :param cert_files:
        An iterable of file names.
    :return:
        A generator producing :class:`.asn1crypto.x509.Certificate` objects.
    """
    for cert_file in cert_files:
        with open(cert_file, 'rb') as f:
            cert_data_bytes = f.read()
        yield from load_certs_from_pemder_data(cert_data_bytes)


def load_certs_from_pemder_data(cert_data_bytes: bytes):
    """
    A convenience function to load PEM/DER-encoded certificates from
    binary data.

    :param cert_data_bytes:
        ``bytes`` object from which to extract certificates.
    :return:
        A generator producing :class:`.asn1crypto.x509.Certificate` objects.
    """
    if pem.detect(cert_data_bytes):
        pems = pem.unarmor(cert_data_bytes, multiple=True)
        for type_name, _, der in pems:
            if type_name is None or type_name.lower() == 'certificate':
                yield x509.Certificate.load(der)
    else:
        yield x509.Certificate.load(cert_data_bytes)


class TrustAnchorSet:
    """
    Read-only collection of certificates whose public keys are trusted to
    sign CRLs issued under their subject name.

    Instances are never modified after construction, so a single set can be
    shared between concurrent CRL checks.

    :param certs:
        The trusted certificates. Their order is preserved; when several
        certificates share a subject name, the first one wins.
    """

    __slots__ = ('_certs',)

    def __init__(self, certs: Iterable[x509.Certificate]):
        object.__setattr__(self, '_certs', tuple(certs))

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def from_files(cls, cert_files) -> 'TrustAnchorSet':
        return cls(load_certs_from_pemder(cert_files))

    def find_issuer(self, name: x509.Name) -> Optional[x509.Certificate]:
        """
        Find the first trusted certificate with the given subject name.

        :return:
            A certificate, or ``None`` if there is no match.
        """
        for cert in self._certs:
            if cert.subject == name:
                return cert
        return None

    def __iter__(self) -> Iterator[x509.Certificate]:
        return iter(self._certs)

    def __len__(self):
        return len(self._certs)

    def __repr__(self):
        names = ', '.join(cert.subject.human_friendly for cert in self._certs)
        return f"TrustAnchorSet([{names}])"
