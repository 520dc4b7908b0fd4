"""Measurement types, SI units, scales and C types used in measurement headers."""

from __future__ import annotations

from enum import IntEnum

__all__ = [
    "MesType",
    "ExtColor",
    "ExtLight",
    "ExtOrientation",
    "ExtTemperature",
    "CType",
    "SIUnit",
    "SIScale",
    "ctype_size",
]


class MesType(IntEnum):
    """Base measurement types (8-bit)."""

    UNDEFINED = 0x00

    # 0x10..0x7F: standardised base measurement types.
    AREA = 0x10
    ACCELERATION = 0x11
    AMPLITUDE = 0x12
    CAPACITANCE = 0x13
    COLOR = 0x14
    COORDINATES = 0x15
    CURRENT = 0x16
    DIMENSION = 0x17
    FREQUENCY = 0x18
    HUMIDITY = 0x19
    INDUCTANCE = 0x1A
    LIGHT = 0x1B
    MAGNETIC_FIELD = 0x1C
    MASS = 0x1D
    MOMENTUM = 0x1E
    ORIENTATION = 0x1F
    PHASE = 0x20
    PRESSURE = 0x21
    RESISTANCE = 0x22
    SOUND = 0x23
    TEMPERATURE = 0x24
    TIME = 0x25
    VELOCITY = 0x26
    VOLTAGE = 0x27
    VOLUME = 0x28
    ACIDITY = 0x29
    CONDUCTIVITY = 0x2A
    FORCE = 0x2B
    ENERGY = 0x2C

    # 0xF0..0xFE: user-defined types.
    USER_1 = 0xF0
    USER_2 = 0xF1
    USER_3 = 0xF2
    USER_4 = 0xF3
    USER_5 = 0xF4
    USER_6 = 0xF5
    USER_7 = 0xF6
    USER_8 = 0xF7
    USER_9 = 0xF8
    USER_10 = 0xF9
    USER_11 = 0xFA
    USER_12 = 0xFB
    USER_13 = 0xFC
    USER_14 = 0xFD
    USER_15 = 0xFE

    LAST = 0xFF


class ExtColor(IntEnum):
    """Extended types for ``MesType.COLOR``."""

    UNDEFINED = 0
    RGBA8 = 0x10
    RGBA16 = 0x11
    RGBAF = 0x12
    CIE1931_XYZ = 0x20
    CIE1931_XYY = 0x21
    CIE1960_UCS = 0x22
    CIE1976_UCS = 0x23
    CIE1960_CCT = 0x24
    CIE1960_CCT_DUV = 0x25


class ExtLight(IntEnum):
    """Extended types for ``MesType.LIGHT`` (radiometric and photometric)."""

    UNDEFINED = 0

    RADIO_RADIANT_FLUX = 0x10
    RADIO_RADIANT_INTEN = 0x11
    RADIO_IRRADIANCE = 0x12
    RADIO_RADIANCE = 0x13

    PHOTO_LUM_FLUX = 0x20
    PHOTO_LUM_INTEN = 0x21
    PHOTO_ILLUMINANCE = 0x22
    PHOTO_LUMINANCE = 0x23


class ExtOrientation(IntEnum):
    """Extended types for ``MesType.ORIENTATION``."""

    UNDEFINED = 0
    ANG_MEASURE = 1
    UNIT_QUATERNION = 2


class ExtTemperature(IntEnum):
    """Extended types for ``MesType.TEMPERATURE``."""

    UNDEFINED = 0
    AMBIENT = 1
    DIE = 2
    OBJECT = 3


class CType(IntEnum):
    """Type used to represent a measurement value in memory (8-bit, little-endian)."""

    UNDEFINED = 0x00

    IEEE754_FLOAT32 = 0x10
    IEEE754_FLOAT64 = 0x11
    IEEE754_FLOAT128 = 0x12
    S8 = 0x13
    S16 = 0x14
    S32 = 0x15
    S64 = 0x16
    S128 = 0x17
    U8 = 0x18
    U16 = 0x19
    U32 = 0x1A
    U64 = 0x1B
    U128 = 0x1C
    BOOL = 0x1D
    COMPLEX_32 = 0x30
    COMPLEX_64 = 0x31

    RANG_UNIT_INTERVAL_32 = 0x80
    RANG_UNIT_INTERVAL_64 = 0x81
    RANG_PERCENT_32 = 0x82
    RANG_PERCENT_64 = 0x83

    USER_1 = 0xF0
    USER_2 = 0xF1
    USER_3 = 0xF2
    USER_4 = 0xF3
    USER_5 = 0xF4
    USER_6 = 0xF5
    USER_7 = 0xF6
    USER_8 = 0xF7
    USER_9 = 0xF8
    USER_10 = 0xF9
    USER_11 = 0xFA
    USER_12 = 0xFB
    USER_13 = 0xFC
    USER_14 = 0xFD
    USER_15 = 0xFE

    MAX = 0xFF


class SIUnit(IntEnum):
    """Standard SI units (16-bit).

    Combined units specific to a base measurement type live in the block
    ``base_type << 8``.
    """

    UNDEFINED = 0

    # SI base units.
    AMPERE = 0x10
    CANDELA = 0x11
    KELVIN = 0x12
    KILOGRAM = 0x13
    METER = 0x14
    MOLE = 0x15
    SECOND = 0x16

    # SI derived units.
    BECQUEREL = 0x20
    COULOMB = 0x21
    DEGREE_CELSIUS = 0x22
    FARAD = 0x23
    GRAY = 0x24
    HENRY = 0x25
    HERTZ = 0x26
    JOULE = 0x27
    KATAL = 0x28
    LUMEN = 0x29
    LUX = 0x2A
    NEWTON = 0x2B
    OHM = 0x2C
    PASCAL = 0x2D
    RADIAN = 0x2E
    SIEMENS = 0x2F
    SIEVERT = 0x30
    STERADIAN = 0x31
    TESLA = 0x32
    VOLT = 0x33
    WATT = 0x34
    WEBER = 0x35

    # Unitless values.
    PERCENT = 0x80
    INTERVAL = 0x81
    DEGREE = 0x82

    # Combined units, grouped by base measurement type.
    METERS_2 = 0x1000
    METER_PER_SECOND_2 = 0x1100
    RELATIVE_HUMIDITY = 0x1900

    CANDELA_PER_METER_2 = 0x1B00
    JOULE_PER_METER_2 = 0x1B01
    JOULE_PER_METER_2_PER_HZ = 0x1B02
    JOULE_PER_METER_2_PER_NM = 0x1B03
    JOULE_PER_METER_3 = 0x1B04
    LUMEN_PER_METER_2 = 0x1B05
    LUMEN_PER_WATT = 0x1B06
    LUMEN_SECOND = 0x1B07
    LUMEN_SECOND_PER_METER_3 = 0x1B08
    LUX_SECOND = 0x1B09
    WATTS_PER_HERTZ = 0x1B0A
    WATTS_PER_METER_2 = 0x1B0B
    WATTS_PER_METER_2_PER_HZ = 0x1B0C
    WATTS_PER_METER_2_PER_NM = 0x1B0D
    WATTS_PER_NM = 0x1B0E
    WATTS_PER_STERADIAN = 0x1B0F
    WATTS_PER_STERADIAN_PER_HERTZ = 0x1B10
    WATTS_PER_STERADIAN_PER_METER_2 = 0x1B11
    WATTS_PER_STERADIAN_PER_METER_2_PER_HZ = 0x1B12
    WATTS_PER_STERADIAN_PER_METER_2_PER_NM = 0x1B13
    WATTS_PER_STERADIAN_PER_NM = 0x1B14

    MICROTESLA = 0x1C00
    GRAMS = 0x1D00
    HECTOPASCAL = 0x2100
    METERS_3_SECOND = 0x2601
    MILLIVOLTS = 0x2700
    METERS_3 = 0x2800
    PH = 0x2900
    SIEMENS_PER_METER = 0x2A00

    # User defined units.
    USER_DEFINED_1 = 0xFF00
    USER_DEFINED_255 = 0xFFFE

    MAX = 0xFFFF


class SIScale(IntEnum):
    """Standard SI scales, as powers of ten."""

    YOTTA = 24
    ZETTA = 21
    EXA = 18
    PETA = 15
    TERA = 12
    GIGA = 9
    MEGA = 6
    KILO = 3
    HECTO = 2
    DECA = 1
    NONE = 0
    DECI = -1
    CENTI = -2
    MILLI = -3
    MICRO = -6
    NANO = -9
    PICO = -12
    FEMTO = -15
    ATTO = -18
    ZEPTO = -21
    YOCTO = -24


_CTYPE_SIZES: dict[int, int] = {
    CType.S8: 1,
    CType.U8: 1,
    CType.BOOL: 1,
    CType.S16: 2,
    CType.U16: 2,
    CType.IEEE754_FLOAT32: 4,
    CType.S32: 4,
    CType.U32: 4,
    CType.RANG_UNIT_INTERVAL_32: 4,
    CType.RANG_PERCENT_32: 4,
    CType.IEEE754_FLOAT64: 8,
    CType.S64: 8,
    CType.U64: 8,
    CType.COMPLEX_32: 8,
    CType.RANG_UNIT_INTERVAL_64: 8,
    CType.RANG_PERCENT_64: 8,
    CType.IEEE754_FLOAT128: 16,
    CType.S128: 16,
    CType.U128: 16,
    CType.COMPLEX_64: 16,
}


def ctype_size(ctype: int) -> int:
    """Return the byte size of a fixed-size C type, or 0 if it can't be determined."""
    return _CTYPE_SIZES.get(int(ctype), 0)