"""Accounts and proxies read from plain text files, one per line."""

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path

from nacl.signing import SigningKey

import graffiti.constants as C

log = logging.getLogger("graffiti.identities")

# Authentication key scheme byte for single ed25519 keys
ED25519_SCHEME = b"\x00"


@dataclass(frozen=True)
class Identity:
    signing_key: SigningKey
    address: str

    @classmethod
    def from_private_key(cls, private_key: str) -> "Identity":
        key_hex = private_key.strip().removeprefix("0x")
        signing_key = SigningKey(bytes.fromhex(key_hex))
        public_key = bytes(signing_key.verify_key)
        address = "0x" + hashlib.sha3_256(public_key + ED25519_SCHEME).hexdigest()
        return cls(signing_key=signing_key, address=address)

    @property
    def public_key_hex(self) -> str:
        return "0x" + bytes(self.signing_key.verify_key).hex()

    def sign(self, message: bytes) -> str:
        return "0x" + self.signing_key.sign(message).signature.hex()

    def __repr__(self) -> str:
        return f"Identity({self.address})"


@dataclass(frozen=True)
class IdentityRoute:
    identity: Identity
    route: str | None


def parse_file(path: str | Path) -> list[str]:
    lines = [line.strip() for line in Path(path).read_text(encoding="utf-8").splitlines()]
    return [line for line in lines if len(line) >= C.MIN_LINE_LENGTH]


def normalize_route(route: str) -> str:
    return route if "://" in route else f"http://{route}"


def load_identities(wallets_path: str | Path, proxies_path: str | Path | None = None) -> list[IdentityRoute]:
    keys = parse_file(wallets_path)
    proxies = parse_file(proxies_path) if proxies_path and Path(proxies_path).is_file() else []

    if len(proxies) < len(keys):
        log.warning("%s wallets but only %s proxies; the rest go direct", len(keys), len(proxies))

    out = []
    for i, key in enumerate(keys):
        route = normalize_route(proxies[i]) if i < len(proxies) else None
        out.append(IdentityRoute(identity=Identity.from_private_key(key), route=route))
    log.info("Loaded %s identities", len(out))
    return out
