"""TLS trust: certificate loading and a composite trust decision-maker.

The platform CA bundle is always trusted. Operators can add their own
anchors (a pinned or self-signed certificate, a private CA) without
replacing the platform bundle: a chain is accepted as soon as any delegate
accepts it.
"""

from __future__ import annotations

import logging
import ssl
from contextlib import closing
from datetime import datetime, timezone
from enum import Enum
from functools import lru_cache
from typing import Any, Iterable, Iterator, Mapping, Sequence

import certifi
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import ExtendedKeyUsageOID
from requests.adapters import HTTPAdapter

from .config import CertificateSource
from .errors import CertificateLoadError, TrustFailure

logger = logging.getLogger(__name__)

DEFAULT_ALIAS = "ca"

_ROLE_USAGES = {
    "client": ExtendedKeyUsageOID.CLIENT_AUTH,
    "server": ExtendedKeyUsageOID.SERVER_AUTH,
}


class TrustRole(str, Enum):
    """Which side of the handshake presented the chain."""

    CLIENT = "client"
    SERVER = "server"


def load_certificate(source: CertificateSource) -> x509.Certificate:
    """Parse one X.509 certificate from PEM or DER data.

    Streams are closed after reading, whether or not parsing succeeds.
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        with closing(source):
            data = source.read()
    try:
        if data.lstrip().startswith(b"-----BEGIN"):
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as exc:
        raise CertificateLoadError(
            f"could not parse X.509 certificate: {exc}"
        ) from exc


def load_trust_store(
    source: CertificateSource, alias: str = DEFAULT_ALIAS
) -> TrustStore:
    """Build a single-entry trust store from a certificate source."""
    store = TrustStore()
    store.set_certificate_entry(alias, load_certificate(source))
    return store


class TrustStore:
    """Alias-to-certificate repository of trust anchors."""

    def __init__(
        self, entries: Mapping[str, x509.Certificate] | None = None
    ) -> None:
        self._entries: dict[str, x509.Certificate] = dict(entries or {})

    def set_certificate_entry(
        self, alias: str, certificate: x509.Certificate
    ) -> None:
        self._entries[alias] = certificate

    def certificates(self) -> list[x509.Certificate]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)


@lru_cache(maxsize=1)
def _platform_anchors() -> tuple[x509.Certificate, ...]:
    with open(certifi.where(), "rb") as bundle:
        return tuple(x509.load_pem_x509_certificates(bundle.read()))


def _issued_by(certificate: x509.Certificate, issuer: x509.Certificate) -> bool:
    if certificate.issuer != issuer.subject:
        return False
    try:
        certificate.verify_directly_issued_by(issuer)
    except (ValueError, TypeError, InvalidSignature):
        return False
    return True


def _check_validity(certificate: x509.Certificate) -> None:
    now = datetime.now(timezone.utc)
    if not (
        certificate.not_valid_before_utc <= now <= certificate.not_valid_after_utc
    ):
        raise TrustFailure("certificate is outside its validity period")


def _is_ca(certificate: x509.Certificate) -> bool:
    try:
        constraints = certificate.extensions.get_extension_for_class(
            x509.BasicConstraints
        ).value
    except x509.ExtensionNotFound:
        return False
    return constraints.ca


def _check_issuer(certificate: x509.Certificate) -> None:
    """An intermediate must be a current CA certificate."""
    if not _is_ca(certificate):
        raise TrustFailure("issuer is not a CA certificate")
    _check_validity(certificate)


def _check_usage(certificate: x509.Certificate, role: TrustRole) -> None:
    try:
        usage = certificate.extensions.get_extension_for_class(
            x509.ExtendedKeyUsage
        ).value
    except x509.ExtensionNotFound:
        return
    allowed = {_ROLE_USAGES[role.value], ExtendedKeyUsageOID.ANY_EXTENDED_KEY_USAGE}
    if not allowed.intersection(usage):
        raise TrustFailure(f"certificate is not valid for {role.value} auth")


class TrustDelegate:
    """Trust decisions against one fixed set of anchors."""

    def __init__(
        self, anchors: Iterable[x509.Certificate], name: str = "custom"
    ) -> None:
        self._anchors = tuple(anchors)
        self.name = name

    @classmethod
    def system_default(cls) -> TrustDelegate:
        """Delegate backed by the platform CA bundle."""
        return cls(_platform_anchors(), name="system")

    @classmethod
    def for_store(cls, store: TrustStore) -> TrustDelegate:
        return cls(store.certificates(), name="store")

    def accepted_issuers(self) -> list[x509.Certificate]:
        return list(self._anchors)

    def check_trusted(
        self,
        chain: Sequence[x509.Certificate],
        auth_type: str,
        role: TrustRole,
    ) -> None:
        """Raise TrustFailure unless ``chain`` leads to one of the anchors.

        ``chain[0]`` is the leaf. Each certificate must be directly issued by
        the next one until a certificate is reached that either is an anchor
        or was issued by one. Every certificate past the leaf, and every
        anchor acting as an issuer, must be a CA within its validity period.
        ``auth_type`` names the key exchange and does not affect the
        decision.
        """
        if not chain:
            raise TrustFailure("empty certificate chain")
        _check_validity(chain[0])
        _check_usage(chain[0], TrustRole(role))
        for index, certificate in enumerate(chain):
            if index > 0:
                _check_issuer(certificate)
            if self._is_anchored(certificate):
                return
            if index + 1 < len(chain) and _issued_by(
                certificate, chain[index + 1]
            ):
                continue
            break
        raise TrustFailure("certificate chain does not lead to a trusted anchor")

    def _is_anchored(self, certificate: x509.Certificate) -> bool:
        return any(
            certificate == anchor
            or (_is_ca(anchor) and _issued_by(certificate, anchor))
            for anchor in self._anchors
        )

    def __repr__(self) -> str:
        return f"TrustDelegate(name={self.name!r}, anchors={len(self._anchors)})"


class TrustAggregator:
    """Accepts a chain when any of its delegates does.

    Delegates are the platform default followed by one per supplied store,
    in order. The set is fixed at construction, so one aggregator can be
    shared by concurrent requests.
    """

    def __init__(
        self,
        stores: Iterable[TrustStore] = (),
        default: TrustDelegate | None = None,
    ) -> None:
        delegates = [default or TrustDelegate.system_default()]
        delegates.extend(TrustDelegate.for_store(store) for store in stores)
        self._delegates = tuple(delegates)
        logger.debug("Trust aggregator built with %d delegates", len(delegates))

    @property
    def delegates(self) -> tuple[TrustDelegate, ...]:
        return self._delegates

    def validate(
        self,
        chain: Sequence[x509.Certificate],
        auth_type: str,
        role: TrustRole = TrustRole.SERVER,
    ) -> None:
        """Return if some delegate trusts ``chain``, else raise TrustFailure.

        Individual delegate failures are not reported.
        """
        if not any(
            self._accepts(delegate, chain, auth_type, role)
            for delegate in self._delegates
        ):
            raise TrustFailure(
                "None of the trust delegates trust this certificate chain"
            )

    def check_client_trusted(
        self, chain: Sequence[x509.Certificate], auth_type: str
    ) -> None:
        self.validate(chain, auth_type, TrustRole.CLIENT)

    def check_server_trusted(
        self, chain: Sequence[x509.Certificate], auth_type: str
    ) -> None:
        self.validate(chain, auth_type, TrustRole.SERVER)

    def accepted_issuers(self) -> list[x509.Certificate]:
        """Concatenate every delegate's issuers, duplicates included."""
        return [
            issuer
            for delegate in self._delegates
            for issuer in delegate.accepted_issuers()
        ]

    def ssl_context(self) -> ssl.SSLContext:
        """Build a client SSL context that trusts exactly our issuers."""
        bundle = "".join(
            issuer.public_bytes(Encoding.PEM).decode("ascii")
            for issuer in self.accepted_issuers()
        )
        context = ssl.create_default_context(cadata=bundle)
        context.check_hostname = True
        context.verify_mode = ssl.CERT_REQUIRED
        # Lets a pinned leaf or intermediate act as an anchor on its own.
        context.verify_flags |= ssl.VERIFY_X509_PARTIAL_CHAIN
        return context

    @staticmethod
    def _accepts(
        delegate: TrustDelegate,
        chain: Sequence[x509.Certificate],
        auth_type: str,
        role: TrustRole,
    ) -> bool:
        try:
            delegate.check_trusted(chain, auth_type, role)
        except TrustFailure:
            return False
        return True


class TrustAggregatorAdapter(HTTPAdapter):
    """HTTPAdapter whose connections verify against a fixed SSL context."""

    def __init__(self, ssl_context: ssl.SSLContext, **kwargs: Any) -> None:
        # HTTPAdapter.__init__ builds the pool manager, which reads this.
        self._ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(
        self,
        connections: int,
        maxsize: int,
        block: bool = False,
        **pool_kwargs: Any,
    ) -> None:
        pool_kwargs["ssl_context"] = self._ssl_context
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)

    def proxy_manager_for(self, proxy: str, **proxy_kwargs: Any) -> Any:
        proxy_kwargs["ssl_context"] = self._ssl_context
        return super().proxy_manager_for(proxy, **proxy_kwargs)
