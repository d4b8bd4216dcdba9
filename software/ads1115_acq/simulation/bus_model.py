from amaranth import *

from ..gateware.registers import *
from ..gateware.bus import I2CBusInterface


__all__ = ["ADS1115BusModel"]


class ADS1115BusModel(Elaboratable):
    '''
    Behavioural I2C transaction engine with an ADS1115 on the far end of the bus.

    en:      _-______-______
    busy:    __-----__-----_
    data_r:  xxxxxxxAxxxxxxB  (valid while busy is low)

    Every accepted byte keeps the engine busy for ``latency`` cycles. The emulated converter
    has the four ADS1115 registers behind a pointer register; writing Config with OS set and a
    single-ended MUX copies ``ain[channel]`` into Conversion, i.e. conversions are instant.

    Fault injection:
        nack_at: 1-based number (in bytes_seen order) of the byte the target does not
        acknowledge; 0 disables. Once a byte is NACKed, it and the rest of its transaction are
        discarded, and reads return 0xff.
        wedge: busy never falls while high.

    Observation:
        bytes_seen: bytes accepted since reset
        conversions: single-shot conversions started
        pointer, config, lo_thresh, hi_thresh, conversion: device registers
    '''
    def __init__(self, *, address=ADS1115_ADDRESS, latency=4):
        if latency < 1:
            raise ValueError("engine latency must be at least 1 cycle, not {}".format(latency))

        self.address = address
        self.latency = latency

        self.bus = I2CBusInterface(name="model")

        self.ain         = Array(Signal(signed(16), name="ain{}".format(n)) for n in range(4))
        self.nack_at     = Signal(16)
        self.wedge       = Signal()

        self.bytes_seen  = Signal(16)
        self.conversions = Signal(16)
        self.pointer     = Signal(2)
        self.config      = Signal(16, init=CONFIG_POWER_ON)
        self.lo_thresh   = Signal(16, init=LO_THRESH_POWER_ON)
        self.hi_thresh   = Signal(16, init=HI_THRESH_POWER_ON)
        self.conversion  = Signal(signed(16))

    def elaborate(self, platform):
        m = Module()

        bus = self.bus

        timer     = Signal(range(max(self.latency, 2)))
        in_txn    = Signal()
        index     = Signal(8)
        msb       = Signal(8)
        nack      = Signal()
        read_data = Signal(8)

        accept    = Signal()
        cur_index = Signal(8)
        acked     = Signal()
        valid     = Signal()
        word      = Signal(16)
        register  = Signal(16)

        m.d.comb += [
            accept.eq(bus.en & ~bus.busy),
            cur_index.eq(Mux(in_txn, index + 1, 0)),
            acked.eq((bus.addr == self.address) & (self.bytes_seen + 1 != self.nack_at)),
            valid.eq(acked & ~(in_txn & nack)),
            word.eq(Cat(bus.data_w, msb)),
        ]

        with m.Switch(self.pointer):
            with m.Case(Pointer.CONVERSION):
                m.d.comb += register.eq(self.conversion)
            with m.Case(Pointer.CONFIG):
                m.d.comb += register.eq(self.config)
            with m.Case(Pointer.LO_THRESH):
                m.d.comb += register.eq(self.lo_thresh)
            with m.Case(Pointer.HI_THRESH):
                m.d.comb += register.eq(self.hi_thresh)

        with m.If(accept):
            m.d.sync += [
                bus.busy.eq(1),
                timer.eq(self.latency - 1),
                self.bytes_seen.eq(self.bytes_seen + 1),
                in_txn.eq(~bus.last),
                index.eq(cur_index),
                nack.eq((in_txn & nack) | ~acked),
            ]

            with m.If(~bus.rw & valid):
                with m.If(cur_index == 0):
                    m.d.sync += self.pointer.eq(bus.data_w[0:2])
                with m.Elif(cur_index == 1):
                    m.d.sync += msb.eq(bus.data_w)
                with m.Elif(cur_index == 2):
                    with m.Switch(self.pointer):
                        with m.Case(Pointer.CONFIG):
                            m.d.sync += self.config.eq(word)
                            # OS=1 with MUX=0b1xx starts a single-ended conversion
                            with m.If(word[15] & word[14]):
                                m.d.sync += [
                                    self.conversion.eq(self.ain[word[12:14]]),
                                    self.conversions.eq(self.conversions + 1),
                                ]
                        with m.Case(Pointer.LO_THRESH):
                            m.d.sync += self.lo_thresh.eq(word)
                        with m.Case(Pointer.HI_THRESH):
                            m.d.sync += self.hi_thresh.eq(word)

            with m.If(bus.rw & valid):
                with m.If(cur_index[0]):
                    m.d.sync += read_data.eq(register[0:8])
                with m.Else():
                    m.d.sync += read_data.eq(register[8:16])
            with m.Elif(bus.rw):
                m.d.sync += read_data.eq(0xff)

        with m.Elif(bus.busy & ~self.wedge):
            with m.If(timer == 0):
                m.d.sync += [
                    bus.busy.eq(0),
                    bus.data_r.eq(read_data),
                    bus.ack_err.eq(nack),
                ]
            with m.Else():
                m.d.sync += timer.eq(timer - 1)

        return m
