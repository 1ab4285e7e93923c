"""
Thread Active Operational Dataset.

A dataset is a sequence of MeshCoP TLVs: [type (1 byte)][length (1 byte)][value].
The CLI accepts it hex-encoded in "dataset set active <hex>".
"""

import ipaddress
from dataclasses import dataclass, field
from enum import IntEnum

MAX_TLV_LENGTH = 0xFE  # 0xFF marks an extended TLV, not used in datasets
MESH_LOCAL_PREFIX_LENGTH = 8
DEFAULT_SECURITY_POLICY = bytes.fromhex("02a0f7f8")  # 672 h key rotation, default flags


class TlvType(IntEnum):
    """MeshCoP TLV types found in an Active Operational Dataset."""

    CHANNEL = 0
    PAN_ID = 1
    EXTENDED_PAN_ID = 2
    NETWORK_NAME = 3
    PSKC = 4
    NETWORK_KEY = 5
    MESH_LOCAL_PREFIX = 7
    SECURITY_POLICY = 12
    ACTIVE_TIMESTAMP = 14
    CHANNEL_MASK = 53


@dataclass
class ActiveOperationalDataset:
    """
    Active Operational Dataset as an ordered mapping of TLV type to value.

    Attributes:
        tlvs: TLV values keyed by type, in wire order.
    """

    tlvs: dict[int, bytes] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        network_name: str,
        channel: int,
        pan_id: int,
        extended_pan_id: bytes,
        network_key: bytes,
        mesh_local_prefix: str,
        active_timestamp_s: int = 1,
    ) -> "ActiveOperationalDataset":
        """
        Build a dataset from named parameters.

        Args:
            network_name: Network name (1-16 bytes UTF-8).
            channel: IEEE 802.15.4 channel (11-26 on page 0).
            pan_id: 16-bit PAN ID.
            extended_pan_id: 8-byte extended PAN ID.
            network_key: 16-byte network key.
            mesh_local_prefix: Mesh-local prefix, e.g. "fd00:1234::/64".
            active_timestamp_s: Active timestamp seconds.

        Returns:
            New dataset.

        Raises:
            ValueError: If any parameter has the wrong size.
        """
        name = network_name.encode("utf-8")
        if not 1 <= len(name) <= 16:
            raise ValueError(f"Network name must be 1-16 bytes: {network_name!r}")
        if len(extended_pan_id) != 8:
            raise ValueError("Extended PAN ID must be 8 bytes")
        if len(network_key) != 16:
            raise ValueError("Network key must be 16 bytes")

        prefix = ipaddress.IPv6Network(mesh_local_prefix)
        if prefix.prefixlen != 64:
            raise ValueError(f"Mesh-local prefix must be a /64: {mesh_local_prefix}")

        tlvs = {
            TlvType.ACTIVE_TIMESTAMP: (active_timestamp_s << 16).to_bytes(8, "big"),
            TlvType.CHANNEL: bytes([0]) + channel.to_bytes(2, "big"),
            TlvType.EXTENDED_PAN_ID: bytes(extended_pan_id),
            TlvType.MESH_LOCAL_PREFIX: prefix.network_address.packed[:MESH_LOCAL_PREFIX_LENGTH],
            TlvType.NETWORK_KEY: bytes(network_key),
            TlvType.NETWORK_NAME: name,
            TlvType.PAN_ID: pan_id.to_bytes(2, "big"),
            TlvType.SECURITY_POLICY: DEFAULT_SECURITY_POLICY,
        }
        return cls(tlvs={int(t): v for t, v in tlvs.items()})

    @classmethod
    def from_tlvs(cls, data: bytes) -> "ActiveOperationalDataset":
        """
        Parse a dataset from raw TLV bytes.

        Raises:
            ValueError: If a TLV header or value is truncated.
        """
        tlvs: dict[int, bytes] = {}
        offset = 0

        while offset < len(data):
            if offset + 2 > len(data):
                raise ValueError(f"Truncated TLV header at offset {offset}")

            tlv_type = data[offset]
            length = data[offset + 1]
            start = offset + 2
            end = start + length
            if end > len(data):
                raise ValueError(
                    f"TLV type {tlv_type} at offset {offset} needs {length} bytes, "
                    f"{len(data) - start} available"
                )

            tlvs[tlv_type] = bytes(data[start:end])
            offset = end

        return cls(tlvs=tlvs)

    @classmethod
    def from_hex(cls, text: str) -> "ActiveOperationalDataset":
        """Parse a dataset from its hex string form."""
        return cls.from_tlvs(bytes.fromhex(text))

    def to_tlvs(self) -> bytes:
        """
        Encode the dataset as TLV bytes.

        Raises:
            ValueError: If a value does not fit a one-byte length.
        """
        out = bytearray()
        for tlv_type, value in self.tlvs.items():
            if len(value) > MAX_TLV_LENGTH:
                raise ValueError(f"TLV type {tlv_type} too long: {len(value)} bytes")
            out.append(tlv_type & 0xFF)
            out.append(len(value))
            out.extend(value)
        return bytes(out)

    def to_hex(self) -> str:
        """Encode the dataset as a lowercase hex string."""
        return self.to_tlvs().hex()

    @property
    def mesh_local_prefix(self) -> ipaddress.IPv6Network | None:
        """Mesh-local /64 prefix, or None if the TLV is absent."""
        value = self.tlvs.get(TlvType.MESH_LOCAL_PREFIX)
        if value is None:
            return None
        if len(value) != MESH_LOCAL_PREFIX_LENGTH:
            raise ValueError(f"Mesh-local prefix TLV must be 8 bytes, got {len(value)}")
        return ipaddress.IPv6Network((value + bytes(8), 64))

    @property
    def channel(self) -> int | None:
        """Channel number (page byte skipped)."""
        value = self.tlvs.get(TlvType.CHANNEL)
        return int.from_bytes(value[1:3], "big") if value else None

    @property
    def pan_id(self) -> int | None:
        value = self.tlvs.get(TlvType.PAN_ID)
        return int.from_bytes(value, "big") if value else None

    @property
    def extended_pan_id(self) -> bytes | None:
        return self.tlvs.get(TlvType.EXTENDED_PAN_ID)

    @property
    def network_name(self) -> str | None:
        value = self.tlvs.get(TlvType.NETWORK_NAME)
        return value.decode("utf-8", errors="replace") if value is not None else None

    @property
    def network_key(self) -> bytes | None:
        return self.tlvs.get(TlvType.NETWORK_KEY)
