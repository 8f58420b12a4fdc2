"""Peer client identification from BitTorrent peer IDs.

Peer IDs encode the client name and version in their first bytes. Known
conventions (see https://wiki.theory.org/BitTorrentSpecification#peer_id):

- Azureus style: ``-qB4250-`` followed by random bytes
- Shadow style: ``T03I--`` + ``---``, one letter for the client followed
  by up to five version characters padded with ``-``
- Mainline style: ``M4-3-6--``
- A few clients with their own fixed prefixes (BitComet, XBT, Opera)
"""

import re
import string
from collections.abc import Callable

from ..util.log import get_logger

UNKNOWN_CLIENT = "Unknown"

logger = get_logger()

_HEX_PEER_ID = re.compile(r"[0-9A-Fa-f]{40}")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f]")

_AZUREUS = re.compile(r"-([A-Za-z~]{2})([0-9A-Za-z]{4})-")
_SHADOW = re.compile(r"([A-Za-z])([0-9A-Za-z.]{1,5})-+")
_MAINLINE = re.compile(r"M(\d{1,2})-(\d{1,2})-(\d{1,2})-")
_XBT = re.compile(r"XBT(\d)(\d)(\d)")

_SHADOW_DIGITS = (
    string.digits + string.ascii_uppercase + string.ascii_lowercase + ".-"
)


def _digit(char: str) -> int:
    return int(char, 36)


def _three_digits(version: str) -> str:
    """``4250`` -> ``4.2.5``; letters count as 10..35 (``41A0`` -> 4.1.10)."""
    return ".".join(str(_digit(c)) for c in version[:3])


def _four_digits(version: str) -> str:
    return ".".join(str(_digit(c)) for c in version)


def _transmission(version: str) -> str:
    """``2940`` -> ``2.94``, ``0072`` -> ``0.72``, ``294Z`` -> ``2.94+``."""
    if version.startswith("000"):
        return f"0.{version[3]}"
    if version.startswith("00"):
        return f"0.{version[2:]}"

    suffix = "+" if version[3] == "Z" else ""
    return f"{version[0]}.{version[1:3]}{suffix}"


def _major_two_minor(version: str) -> str:
    """``0150`` -> ``1.50`` (first character unused)."""
    return f"{_digit(version[1])}.{version[2:4]}"


AZUREUS_CLIENTS: dict[str, tuple[str, Callable[[str], str]]] = {
    "7T": ("aTorrent", _three_digits),
    "AG": ("Ares", _three_digits),
    "A~": ("Ares", _three_digits),
    "AR": ("Arctic", _three_digits),
    "AV": ("Avicora", _three_digits),
    "AX": ("BitPump", _three_digits),
    "AZ": ("Vuze", _four_digits),
    "BB": ("BitBuddy", _three_digits),
    "BC": ("BitComet", _major_two_minor),
    "BF": ("Bitflu", _three_digits),
    "BG": ("BTG", _three_digits),
    "BI": ("BiglyBT", _four_digits),
    "BR": ("BitRocket", _three_digits),
    "BS": ("BTSlave", _three_digits),
    "BT": ("BitTorrent", _three_digits),
    "BW": ("BitWombat", _three_digits),
    "BX": ("BittorrentX", _three_digits),
    "CD": ("Enhanced CTorrent", _three_digits),
    "CT": ("CTorrent", _three_digits),
    "DE": ("Deluge", _three_digits),
    "DP": ("Propagate Data Client", _three_digits),
    "EB": ("EBit", _three_digits),
    "ES": ("Electric Sheep", _three_digits),
    "FC": ("FileCroc", _three_digits),
    "FD": ("Free Download Manager", _three_digits),
    "FT": ("FoxTorrent", _three_digits),
    "FW": ("FrostWire", _three_digits),
    "FX": ("Freebox BitTorrent", _three_digits),
    "GS": ("GSTorrent", _three_digits),
    "HL": ("Halite", _three_digits),
    "HN": ("Hydranode", _three_digits),
    "KG": ("KGet", _three_digits),
    "KT": ("KTorrent", _three_digits),
    "LH": ("LH-ABC", _three_digits),
    "LP": ("Lphant", _three_digits),
    "LT": ("libtorrent (Rasterbar)", _three_digits),
    "lt": ("libTorrent (Rakshasa)", _three_digits),
    "LW": ("LimeWire", _three_digits),
    "MO": ("MonoTorrent", _three_digits),
    "MP": ("MooPolice", _three_digits),
    "MR": ("Miro", _three_digits),
    "MT": ("MoonlightTorrent", _three_digits),
    "NX": ("Net Transport", _three_digits),
    "OT": ("OmegaTorrent", _three_digits),
    "PD": ("Pando", _three_digits),
    "PI": ("PicoTorrent", _three_digits),
    "qB": ("qBittorrent", _three_digits),
    "QD": ("QQDownload", _three_digits),
    "QT": ("Qt 4 Torrent example", _three_digits),
    "RT": ("Retriever", _three_digits),
    "SB": ("Swiftbit", _three_digits),
    "SD": ("Thunder", _three_digits),
    "SK": ("spark", _three_digits),
    "SS": ("SwarmScope", _three_digits),
    "ST": ("SymTorrent", _three_digits),
    "st": ("sharktorrent", _three_digits),
    "SZ": ("Shareaza", _four_digits),
    "TN": ("TorrentDotNET", _three_digits),
    "TR": ("Transmission", _transmission),
    "TS": ("Torrentstorm", _three_digits),
    "TT": ("TuoTu", _three_digits),
    "UL": ("uLeecher!", _three_digits),
    "UM": ("µTorrent Mac", _three_digits),
    "UT": ("µTorrent", _three_digits),
    "UW": ("µTorrent Web", _three_digits),
    "VG": ("Vagaa", _three_digits),
    "WD": ("WebTorrent Desktop", _three_digits),
    "WT": ("BitLet", _three_digits),
    "WW": ("WebTorrent", _three_digits),
    "XL": ("Xunlei", _three_digits),
    "XT": ("XanTorrent", _three_digits),
    "XX": ("Xtorrent", _three_digits),
    "ZT": ("ZipTorrent", _three_digits),
}

SHADOW_CLIENTS: dict[str, str] = {
    "A": "ABC",
    "O": "Osprey Permaseed",
    "Q": "BTQueue",
    "R": "Tribler",
    "S": "Shad0w",
    "T": "BitTornado",
    "U": "UPnP NAT Bit Torrent",
}


def _decode_azureus(text: str) -> tuple[str, str | None] | None:
    match = _AZUREUS.match(text)
    if not match:
        return None

    code, version = match.groups()
    if code not in AZUREUS_CLIENTS:
        return None

    name, version_style = AZUREUS_CLIENTS[code]
    return name, version_style(version)


def _decode_shadow(text: str) -> tuple[str, str | None] | None:
    match = _SHADOW.fullmatch(text[:9])
    if not match or text[6:9] != "---":
        return None

    code, version = match.groups()
    if code not in SHADOW_CLIENTS:
        return None

    return (
        SHADOW_CLIENTS[code],
        ".".join(str(_SHADOW_DIGITS.index(c)) for c in version),
    )


def _decode_mainline(text: str) -> tuple[str, str | None] | None:
    match = _MAINLINE.match(text)
    if not match:
        return None

    return "Mainline", ".".join(match.groups())


def _decode_prefix(raw: bytes) -> tuple[str, str | None] | None:
    if raw.startswith(b"exbc"):
        name = "BitLord" if raw[6:10] == b"LORD" else "BitComet"
        return name, f"{raw[4]}.{raw[5]:02d}"

    match = _XBT.match(raw[:6].decode("latin-1"))
    if match:
        return "XBT Client", ".".join(match.groups())

    if raw.startswith(b"OP"):
        return "Opera", raw[2:6].decode("latin-1")

    return None


def peer_id_to_bytes(peer_id: str) -> bytes:
    """Convert a daemon-reported peer ID to raw bytes.

    rTorrent reports the ID either hex-encoded (40 chars) or as a raw
    string in which every character carries one byte.
    """
    if _HEX_PEER_ID.fullmatch(peer_id):
        return bytes.fromhex(peer_id)

    return bytes(ord(c) & 0xFF for c in peer_id)


def decode_peer_id(raw: bytes) -> tuple[str, str | None] | None:
    """Decode client name and version from a raw peer ID.

    Returns:
        Tuple of (client, version) where version may be None, or None
        when the ID doesn't match any known convention
    """
    if len(raw) < 8:
        return None

    text = raw[:20].decode("latin-1")

    return (
        _decode_azureus(text)
        or _decode_shadow(text)
        or _decode_mainline(text)
        or _decode_prefix(raw)
    )


def is_valid_client_version(client_version: str) -> bool:
    """Check that a daemon-reported client version looks like text.

    Daemons sometimes echo binary garbage in this field.
    """
    return bool(
        client_version
        and client_version[0].isascii()
        and client_version[0].isalpha()
        and not _CONTROL_CHARS.search(client_version)
    )


def resolve_client(peer_id: str | None, client_version: str | None) -> str:
    """Resolve the display name of a peer's client.

    1. Decode the peer ID against known fingerprints
    2. Fall back to the daemon-reported client version if it looks valid
    3. Fall back to "Unknown"

    Never raises: decoding problems fall through to the next step.
    """
    if peer_id and len(peer_id) >= 8:
        try:
            decoded = decode_peer_id(peer_id_to_bytes(peer_id))
        except (ValueError, IndexError) as e:
            logger.debug(f"Failed to decode peer ID {peer_id!r}: {e}")
            decoded = None

        if decoded:
            client, version = decoded
            if client and client.lower() != "unknown":
                return f"{client} {version}" if version else client

    if client_version and is_valid_client_version(client_version):
        return client_version

    return UNKNOWN_CLIENT
