from datetime import datetime, timezone

from asn1crypto import algos
from asn1crypto.keys import PublicKeyInfo
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import (
    dsa,
    ec,
    ed448,
    ed25519,
    padding,
    rsa,
)

from .errors import DSAParametersUnavailable, PSSParameterMismatch

__all__ = ['validate_sig', 'as_utc']


def as_utc(dt: datetime) -> datetime:
    """
    Normalise a datetime to UTC. Naive datetimes are taken to be in UTC
    already.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def validate_sig(
    signature: bytes,
    signed_data: bytes,
    public_key_info: PublicKeyInfo,
    sig_algo: str,
    hash_algo: str,
    parameters=None,
):
    """
    Verify a raw signature using ``cryptography``.

    :raises cryptography.exceptions.InvalidSignature:
        if the signature does not validate, or cannot be validated with
        the key material available.
    """

    if (
        sig_algo == 'dsa'
        and public_key_info['algorithm']['parameters'].native is None
    ):
        raise DSAParametersUnavailable(
            "DSA public key parameters were not provided."
        )

    # pyca/cryptography can't load PSS-exclusive keys without some help:
    if public_key_info.algorithm == 'rsassa_pss':
        public_key_info = public_key_info.copy()
        _check_pss_params(parameters)
        pss_key_params = public_key_info['algorithm']['parameters'].native
        if pss_key_params is not None and pss_key_params != parameters.native:
            raise PSSParameterMismatch(
                "Public key info includes PSS parameters that do not match "
                "those on the signature"
            )
        public_key_info['algorithm'] = {'algorithm': 'rsa'}

    pub_key = serialization.load_der_public_key(public_key_info.dump())

    if sig_algo == 'rsassa_pkcs1v15':
        _check_key_type(pub_key, rsa.RSAPublicKey, sig_algo)
        h = getattr(hashes, hash_algo.upper())()
        pub_key.verify(signature, signed_data, padding.PKCS1v15(), h)
    elif sig_algo == 'rsassa_pss':
        _check_key_type(pub_key, rsa.RSAPublicKey, sig_algo)
        _check_pss_params(parameters)
        mga: algos.MaskGenAlgorithm = parameters['mask_gen_algorithm']
        if not mga['algorithm'].native == 'mgf1':
            raise NotImplementedError("Only MFG1 is supported")

        mgf_md_name = mga['parameters']['algorithm'].native
        salt_len: int = parameters['salt_length'].native

        mgf_md = getattr(hashes, mgf_md_name.upper())()
        pss_padding = padding.PSS(
            mgf=padding.MGF1(algorithm=mgf_md), salt_length=salt_len
        )
        hash_spec = getattr(hashes, hash_algo.upper())()
        pub_key.verify(signature, signed_data, pss_padding, hash_spec)
    elif sig_algo == 'dsa':
        _check_key_type(pub_key, dsa.DSAPublicKey, sig_algo)
        hash_spec = getattr(hashes, hash_algo.upper())()
        pub_key.verify(signature, signed_data, hash_spec)
    elif sig_algo == 'ecdsa':
        _check_key_type(pub_key, ec.EllipticCurvePublicKey, sig_algo)
        hash_spec = getattr(hashes, hash_algo.upper())()
        pub_key.verify(signature, signed_data, ec.ECDSA(hash_spec))
    elif sig_algo == 'ed25519':
        _check_key_type(pub_key, ed25519.Ed25519PublicKey, sig_algo)
        pub_key.verify(signature, signed_data)
    elif sig_algo == 'ed448':
        _check_key_type(pub_key, ed448.Ed448PublicKey, sig_algo)
        pub_key.verify(signature, signed_data)
    else:  # pragma: nocover
        raise NotImplementedError(
            f"Signature mechanism {sig_algo} is not supported."
        )


def _check_key_type(pub_key, expected_type, sig_algo):
    if not isinstance(pub_key, expected_type):
        raise InvalidSignature(
            f"Public key of type {type(pub_key).__name__} cannot verify "
            f"{sig_algo} signatures."
        )


def _check_pss_params(parameters):
    if not isinstance(parameters, algos.RSASSAPSSParams):
        raise InvalidSignature("RSASSA-PSS parameters are missing.")
