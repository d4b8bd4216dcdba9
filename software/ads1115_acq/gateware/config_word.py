from amaranth import *

from .registers import *


__all__ = ["ConfigWordEncoder"]


class ConfigWordEncoder(Elaboratable):
    """
    Combinational configuration word for a single-shot conversion of ``channel``.

    The gain and data rate are fixed at elaboration time; the result always equals
    ``config_word(channel, gain=gain, data_rate=data_rate)``.
    """
    def __init__(self, *, gain=Gain.FSR_4V096, data_rate=DataRate.SPS_128):
        self.gain      = Gain(gain)
        self.data_rate = DataRate(data_rate)

        self.channel = Signal(2)
        self.word    = Signal(config_layout)

    def elaborate(self, platform):
        m = Module()

        m.d.comb += [
            self.word.os.eq(1),
            self.word.mux.eq(Cat(self.channel, C(1, 1))),
            self.word.pga.eq(self.gain.value),
            self.word.mode.eq(Mode.SINGLE_SHOT.value),
            self.word.dr.eq(self.data_rate.value),
            self.word.comp_mode.eq(0),
            self.word.comp_pol.eq(0),
            self.word.comp_lat.eq(0),
            self.word.comp_que.eq(CompQueue.DISABLE.value),
        ]

        return m
