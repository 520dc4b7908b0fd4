import pytest

from steppipe.units import (
    CType,
    ExtColor,
    ExtLight,
    ExtOrientation,
    ExtTemperature,
    MesType,
    SIScale,
    SIUnit,
    ctype_size,
)


@pytest.mark.parametrize(
    "ctype,size",
    [
        (CType.S8, 1),
        (CType.U8, 1),
        (CType.BOOL, 1),
        (CType.S16, 2),
        (CType.U16, 2),
        (CType.IEEE754_FLOAT32, 4),
        (CType.U32, 4),
        (CType.RANG_PERCENT_32, 4),
        (CType.IEEE754_FLOAT64, 8),
        (CType.COMPLEX_32, 8),
        (CType.RANG_UNIT_INTERVAL_64, 8),
        (CType.IEEE754_FLOAT128, 16),
        (CType.U128, 16),
        (CType.COMPLEX_64, 16),
    ],
)
def test_ctype_size_fixed_types(ctype, size):
    assert ctype_size(ctype) == size


@pytest.mark.parametrize(
    "ctype", [CType.UNDEFINED, CType.USER_1, CType.USER_15, CType.MAX]
)
def test_ctype_size_ambiguous_types_are_zero(ctype):
    assert ctype_size(ctype) == 0


def test_ctype_size_accepts_plain_ints():
    assert ctype_size(int(CType.S32)) == ctype_size(CType.S32)
    assert ctype_size(0x50) == 0


def test_ctype_sizes_are_powers_of_two_or_zero():
    sizes = {ctype_size(c) for c in CType}
    assert sizes <= {0, 1, 2, 4, 8, 16}
    assert 0 in sizes


def test_signed_and_unsigned_match_in_size():
    pairs = [
        (CType.S8, CType.U8),
        (CType.S16, CType.U16),
        (CType.S32, CType.U32),
        (CType.S64, CType.U64),
        (CType.S128, CType.U128),
    ]
    for signed, unsigned in pairs:
        assert ctype_size(signed) == ctype_size(unsigned)


def test_mes_type_lookup_round_trip():
    for member in MesType:
        assert MesType(int(member)) is member
    assert MesType(0x24) is MesType.TEMPERATURE


def test_mes_type_unknown_value_raises():
    with pytest.raises(ValueError):
        MesType(0x7F)


def test_combined_units_sit_in_their_base_type_block():
    light_units = [u for u in SIUnit if u.name.startswith(("WATTS_PER", "LUMEN_"))]
    assert light_units
    assert all(MesType(u >> 8) is MesType.LIGHT for u in light_units)
    assert MesType(SIUnit(0x1000) >> 8) is MesType.AREA
    assert MesType(SIUnit(0x1100) >> 8) is MesType.ACCELERATION
    assert MesType(SIUnit(0x1900) >> 8) is MesType.HUMIDITY
    assert MesType(SIUnit(0x2100) >> 8) is MesType.PRESSURE
    assert MesType(SIUnit(0x2700) >> 8) is MesType.VOLTAGE
    assert MesType(SIUnit(0x2A00) >> 8) is MesType.CONDUCTIVITY


def test_si_units_fit_sixteen_bits():
    assert all(0 <= u <= 0xFFFF for u in SIUnit)
    assert SIUnit(0xFFFE) is SIUnit.USER_DEFINED_255


def test_si_scale_is_symmetric():
    for scale in SIScale:
        if scale is not SIScale.NONE:
            assert SIScale(-scale).value == -scale.value
    assert SIScale(-6) is SIScale.MICRO


def test_si_scale_fits_signed_byte():
    for scale in SIScale:
        assert SIScale(int(scale)) is scale
        assert -128 <= SIScale(int(scale)).value <= 127
    assert SIScale(24) is SIScale.YOTTA
    assert SIScale(-24) is SIScale.YOCTO


@pytest.mark.parametrize(
    "enum_cls", [ExtColor, ExtLight, ExtOrientation, ExtTemperature]
)
def test_extended_types_fit_a_byte_and_start_undefined(enum_cls):
    assert enum_cls(0).name == "UNDEFINED"
    assert all(0 <= m <= 0xFF for m in enum_cls)


def test_extended_lookup():
    assert ExtTemperature(2) is ExtTemperature.DIE
    assert ExtOrientation(2) is ExtOrientation.UNIT_QUATERNION
    with pytest.raises(ValueError):
        ExtTemperature(4)