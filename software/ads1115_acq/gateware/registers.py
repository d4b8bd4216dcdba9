# Ref: Texas Instruments ADS111x Ultra-Small, Low-Power, I2C-Compatible, 860-SPS, 16-Bit ADCs
# Document Number: SBAS444D

import math
from amaranth import *
from amaranth.lib import data, enum


__all__ = [
    "ADS1115_ADDRESS", "ADS1115_ADDRESSES",
    "Pointer", "InputMux", "Gain", "Mode", "DataRate", "CompQueue", "CycleStatus",
    "FULL_SCALE", "SAMPLES_PER_SECOND",
    "config_layout", "single_ended_mux", "config_fields", "pack_config", "unpack_config",
    "config_word", "conversion_cycles", "lsb_volts", "code_to_volts",
    "CONFIG_POWER_ON", "LO_THRESH_POWER_ON", "HI_THRESH_POWER_ON",
]


ADS1115_ADDRESS   = 0x48 # ADDR tied to GND
ADS1115_ADDRESSES = range(0x48, 0x4c)

CONFIG_POWER_ON    = 0x8583
LO_THRESH_POWER_ON = 0x8000
HI_THRESH_POWER_ON = 0x7fff


class Pointer(enum.Enum, shape=2):
    CONVERSION = 0b00
    CONFIG     = 0b01
    LO_THRESH  = 0b10
    HI_THRESH  = 0b11


class InputMux(enum.Enum, shape=3):
    DIFF_0_1 = 0b000
    DIFF_0_3 = 0b001
    DIFF_1_3 = 0b010
    DIFF_2_3 = 0b011
    SINGLE_0 = 0b100
    SINGLE_1 = 0b101
    SINGLE_2 = 0b110
    SINGLE_3 = 0b111


class Gain(enum.Enum, shape=3):
    FSR_6V144 = 0b000
    FSR_4V096 = 0b001
    FSR_2V048 = 0b010 # default
    FSR_1V024 = 0b011
    FSR_0V512 = 0b100
    FSR_0V256 = 0b101


class Mode(enum.Enum, shape=1):
    CONTINUOUS  = 0
    SINGLE_SHOT = 1 # default


class DataRate(enum.Enum, shape=3):
    SPS_8   = 0b000
    SPS_16  = 0b001
    SPS_32  = 0b010
    SPS_64  = 0b011
    SPS_128 = 0b100 # default
    SPS_250 = 0b101
    SPS_475 = 0b110
    SPS_860 = 0b111


class CompQueue(enum.Enum, shape=2):
    ASSERT_1 = 0b00
    ASSERT_2 = 0b01
    ASSERT_4 = 0b10
    DISABLE  = 0b11 # default


class CycleStatus(enum.Enum, shape=2):
    READY       = 0
    IN_PROGRESS = 1
    COMPLETED   = 2
    ABORTED     = 3


FULL_SCALE = {
    Gain.FSR_6V144: 6.144,
    Gain.FSR_4V096: 4.096,
    Gain.FSR_2V048: 2.048,
    Gain.FSR_1V024: 1.024,
    Gain.FSR_0V512: 0.512,
    Gain.FSR_0V256: 0.256,
}

SAMPLES_PER_SECOND = {
    DataRate.SPS_8:     8,
    DataRate.SPS_16:   16,
    DataRate.SPS_32:   32,
    DataRate.SPS_64:   64,
    DataRate.SPS_128: 128,
    DataRate.SPS_250: 250,
    DataRate.SPS_475: 475,
    DataRate.SPS_860: 860,
}


# Config register, LSB first.
config_layout = data.StructLayout({
    "comp_que":  2,
    "comp_lat":  1,
    "comp_pol":  1,
    "comp_mode": 1,
    "dr":        3,
    "mode":      1,
    "pga":       3,
    "mux":       3,
    "os":        1,
})

_config_enums = {
    "comp_que": CompQueue,
    "dr":       DataRate,
    "mode":     Mode,
    "pga":      Gain,
    "mux":      InputMux,
}


def single_ended_mux(channel):
    if channel not in range(4):
        raise ValueError("invalid single-ended channel {!r}".format(channel))
    return InputMux(InputMux.SINGLE_0.value + channel)


def config_fields(channel, *, gain=Gain.FSR_4V096, data_rate=DataRate.SPS_128):
    """Returns the configuration word fields for a single-shot conversion of one single-ended
    input, with the comparator disabled."""
    return {
        "os":        1,
        "mux":       single_ended_mux(channel),
        "pga":       Gain(gain),
        "mode":      Mode.SINGLE_SHOT,
        "dr":        DataRate(data_rate),
        "comp_mode": 0,
        "comp_pol":  0,
        "comp_lat":  0,
        "comp_que":  CompQueue.DISABLE,
    }


def pack_config(fields):
    word = 0
    for name, field in config_layout:
        value = fields[name]
        if isinstance(value, enum.Enum):
            value = value.value
        word |= (int(value) & ((1 << field.width) - 1)) << field.offset
    return word


def unpack_config(word):
    fields = {}
    for name, field in config_layout:
        value = (word >> field.offset) & ((1 << field.width) - 1)
        if name in _config_enums:
            value = _config_enums[name](value)
        fields[name] = value
    return fields


def config_word(channel, *, gain=Gain.FSR_4V096, data_rate=DataRate.SPS_128):
    return pack_config(config_fields(channel, gain=gain, data_rate=data_rate))


def conversion_cycles(clk_freq, data_rate):
    """Number of ``clk_freq`` cycles that cover one single-shot conversion at ``data_rate``,
    including the 10% internal oscillator tolerance."""
    sps = SAMPLES_PER_SECOND[DataRate(data_rate)]
    return math.ceil(clk_freq * 11 / (sps * 10))


def lsb_volts(gain):
    return FULL_SCALE[Gain(gain)] / 32768


def code_to_volts(code, gain):
    return code * lsb_volts(gain)
