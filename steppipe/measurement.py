"""Measurement headers, payload sizing and validation."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

from .units import ctype_size

__all__ = [
    "MASK_FULL_TYPE_POS",
    "MASK_FULL_TYPE",
    "MASK_BASE_TYPE_POS",
    "MASK_BASE_TYPE",
    "MASK_EXT_TYPE_POS",
    "MASK_EXT_TYPE",
    "MASK_FLAGS_POS",
    "MASK_FLAGS",
    "MASK_FORMAT_POS",
    "MASK_FORMAT",
    "MASK_ENCODING_POS",
    "MASK_ENCODING",
    "MASK_COMPRESSION_POS",
    "MASK_COMPRESSION",
    "MASK_TIMESTAMP_POS",
    "MASK_TIMESTAMP",
    "ARBITRARY_SAMPLES",
    "DataFormat",
    "Encoding",
    "Compression",
    "Timestamp",
    "Fragment",
    "VectorSize",
    "PayloadSpaceError",
    "MeasurementHeader",
    "Measurement",
    "timestamp_size",
]

# Mask values for use with the filter word.
MASK_FULL_TYPE_POS = 0
MASK_FULL_TYPE = 0xFFFF << MASK_FULL_TYPE_POS
MASK_BASE_TYPE_POS = 0
MASK_BASE_TYPE = 0xFF << MASK_BASE_TYPE_POS
MASK_EXT_TYPE_POS = 8
MASK_EXT_TYPE = 0xFF << MASK_EXT_TYPE_POS
MASK_FLAGS_POS = 16
MASK_FLAGS = 0xFFFF << MASK_FLAGS_POS
MASK_FORMAT_POS = 16
MASK_FORMAT = 0x7 << MASK_FORMAT_POS
MASK_ENCODING_POS = 19
MASK_ENCODING = 0xF << MASK_ENCODING_POS
MASK_COMPRESSION_POS = 23
MASK_COMPRESSION = 0x7 << MASK_COMPRESSION_POS
MASK_TIMESTAMP_POS = 26
MASK_TIMESTAMP = 0x7 << MASK_TIMESTAMP_POS

#: Sample count value meaning "arbitrary count, stored in the payload".
ARBITRARY_SAMPLES = 15


class DataFormat(IntEnum):
    """Payload data structure."""

    NONE = 0
    CBOR = 1


class Encoding(IntEnum):
    """Payload encoding."""

    NONE = 0
    BASE64 = 1
    BASE45 = 2


class Compression(IntEnum):
    """Payload compression algorithm."""

    NONE = 0
    LZ4 = 1


class Timestamp(IntEnum):
    """Optional timestamp format."""

    NONE = 0
    EPOCH_32 = 1
    EPOCH_64 = 2
    UPTIME_MS_32 = 3
    UPTIME_MS_64 = 4
    UPTIME_US_64 = 5


class Fragment(IntEnum):
    """Packet fragment state."""

    NONE = 0
    PARTIAL = 1
    FINAL = 2


class VectorSize(IntEnum):
    """Number of vector components minus one."""

    NONE = 0
    SZ_2 = 1
    SZ_3 = 2
    SZ_4 = 3


class PayloadSpaceError(ValueError):
    """The payload length is too small for the minimum payload."""


_TIMESTAMP_SIZES: dict[int, int] = {
    Timestamp.NONE: 0,
    Timestamp.EPOCH_32: 4,
    Timestamp.UPTIME_MS_32: 4,
    Timestamp.EPOCH_64: 8,
    Timestamp.UPTIME_MS_64: 8,
    Timestamp.UPTIME_US_64: 8,
}


def timestamp_size(timestamp: int) -> int:
    """Return the number of bytes a timestamp of the given format occupies."""
    return _TIMESTAMP_SIZES.get(int(timestamp), 0)


def _f32(value: float) -> float:
    """Round a value to single precision."""
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _ceil(value: float) -> int:
    """Ceiling for positive single-precision values."""
    n = _f32(value)
    i = int(n)
    return i if n == float(i) else i + 1


@dataclass
class MeasurementHeader:
    """The three 32-bit words (filter, unit, src/len) describing a measurement."""

    # Filter word.
    base_type: int = 0
    ext_type: int = 0
    data_format: int = DataFormat.NONE
    encoding: int = Encoding.NONE
    compression: int = Compression.NONE
    timestamp: int = Timestamp.NONE
    rsvd: int = 0
    # Unit word.
    si_unit: int = 0
    scale_factor: int = 0
    ctype: int = 0
    # Src/len word.
    len: int = 0
    fragment: int = Fragment.NONE
    vec_sz: int = VectorSize.NONE
    samples: int = 0
    sourceid: int = 0

    @classmethod
    def from_bits(
        cls, filter_bits: int, unit_bits: int, srclen_bits: int
    ) -> MeasurementHeader:
        """Build a header from its three packed 32-bit words."""
        flags = (filter_bits >> 16) & 0xFFFF
        scale = (unit_bits >> 16) & 0xFF
        if scale >= 0x80:
            scale -= 0x100
        return cls(
            base_type=filter_bits & 0xFF,
            ext_type=(filter_bits >> 8) & 0xFF,
            data_format=flags & 0x7,
            encoding=(flags >> 3) & 0xF,
            compression=(flags >> 7) & 0x7,
            timestamp=(flags >> 10) & 0x7,
            rsvd=(flags >> 13) & 0x7,
            si_unit=unit_bits & 0xFFFF,
            scale_factor=scale,
            ctype=(unit_bits >> 24) & 0xFF,
            len=srclen_bits & 0xFFFF,
            fragment=(srclen_bits >> 16) & 0x3,
            vec_sz=(srclen_bits >> 18) & 0x3,
            samples=(srclen_bits >> 20) & 0xF,
            sourceid=(srclen_bits >> 24) & 0xFF,
        )

    @property
    def flags_bits(self) -> int:
        """The 16-bit flags field of the filter word."""
        return (
            (int(self.data_format) & 0x7)
            | (int(self.encoding) & 0xF) << 3
            | (int(self.compression) & 0x7) << 7
            | (int(self.timestamp) & 0x7) << 10
            | (int(self.rsvd) & 0x7) << 13
        )

    @property
    def filter_bits(self) -> int:
        """The packed 32-bit filter word."""
        return (
            (int(self.base_type) & 0xFF)
            | (int(self.ext_type) & 0xFF) << 8
            | self.flags_bits << 16
        )

    @property
    def unit_bits(self) -> int:
        """The packed 32-bit unit word."""
        return (
            (int(self.si_unit) & 0xFFFF)
            | (int(self.scale_factor) & 0xFF) << 16
            | (int(self.ctype) & 0xFF) << 24
        )

    @property
    def srclen_bits(self) -> int:
        """The packed 32-bit source/length word."""
        return (
            (int(self.len) & 0xFFFF)
            | (int(self.fragment) & 0x3) << 16
            | (int(self.vec_sz) & 0x3) << 18
            | (int(self.samples) & 0xF) << 20
            | (int(self.sourceid) & 0xFF) << 24
        )

    def payload_size(self) -> int | None:
        """Minimum payload size in bytes, or None if it can't be determined.

        Data format and compression are not taken into account.
        """
        if self.samples >= ARBITRARY_SAMPLES:
            return None
        count = 2 ** int(self.samples)

        size = ctype_size(self.ctype)
        if not size:
            return None
        length = size * count

        if self.vec_sz:
            length *= 1 + int(self.vec_sz)

        if self.timestamp:
            length += timestamp_size(self.timestamp)

        if self.encoding == Encoding.BASE64:
            # BASE64 encodes 3 bytes in 4 characters.
            length = _ceil(_f32(length) / 3.0) * 4
        elif self.encoding == Encoding.BASE45:
            # Worst case for BASE45 is 1.67, except with a single byte.
            length = 2 if length == 1 else _ceil(float(length) * 1.67)

        return length


@dataclass
class Measurement:
    """A measurement: header plus payload bytes."""

    header: MeasurementHeader = field(default_factory=MeasurementHeader)
    payload: bytearray = field(default_factory=bytearray)
    free_after_use: bool = False

    def validate(self) -> None:
        """Raise PayloadSpaceError if the payload length is below the minimum."""
        size = self.header.payload_size()
        if size is not None and size > self.header.len:
            raise PayloadSpaceError(
                f"payload length {self.header.len} is smaller than "
                f"the required {size} bytes"
            )

    def format(self) -> str:
        """Return a human-readable dump of the header and payload."""
        h = self.header
        scale_raw = int(h.scale_factor) & 0xFF
        lines = [
            f"Filter:           0x{h.filter_bits:08X}",
            f"  base_type:      0x{int(h.base_type):02X} ({int(h.base_type)})",
            f"  ext_type:       0x{int(h.ext_type):02X} ({int(h.ext_type)})",
            f"  Flags:          0x{h.flags_bits:04X}",
            f"    data_format:  {int(h.data_format)}",
            f"    encoding:     {int(h.encoding)}",
            f"    compression:  {int(h.compression)}",
            f"    timestamp:    {int(h.timestamp)}",
            f"    _rsvd:        {int(h.rsvd)}",
            "",
            f"Unit:             0x{h.unit_bits:08X}",
            f"  si_unit:        0x{int(h.si_unit):04X} ({int(h.si_unit)})",
            f"  scale_factor:   0x{scale_raw:02X} (10^{int(h.scale_factor)})",
            f"  ctype:          0x{int(h.ctype):02X} ({int(h.ctype)})",
            "",
            f"SrcLen:           0x{h.srclen_bits:08X}",
            f"  len:            0x{int(h.len):04X} ({int(h.len)})",
            f"  fragment:       {int(h.fragment)}",
            f"  vec_sz:         {int(h.vec_sz)}",
        ]
        if h.samples == ARBITRARY_SAMPLES:
            lines.append("  samples:        - (Arbitrary count, see payload)")
        elif h.samples:
            lines.append(f"  samples:        2^{int(h.samples)}")
        else:
            lines.append("  samples:        0 (1 sample)")
        lines.append(f"  sourceid:       {int(h.sourceid)}")
        lines.append("")
        if h.len:
            data = bytes(self.payload[: h.len])
            lines.append("Payload: " + "".join(f"{b:02X} " for b in data))
        return "\n".join(lines) + "\n"