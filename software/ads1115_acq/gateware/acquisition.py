from amaranth import *

from .registers import *
from .bus import I2CBusInterface
from .config_word import ConfigWordEncoder
from .result import ResultRegister


__all__ = ["ADS1115Acquisition"]


class ADS1115Acquisition(Elaboratable):
    '''
    Single-shot, single-channel ADS1115 acquisition over an I2C transaction engine.

    start:    _-______________________________________-___
    done:     -_________________________________________--
    bus:       | P C1 C0 | P | R R |
               config    redirect read

    One cycle is three bus transactions: pointer=Config plus the two configuration word bytes
    (which also starts the conversion), pointer=Conversion, and a two byte read. Each byte is
    issued only while the engine is idle and this initiator holds the grant. An acknowledge
    error on either write transaction returns to Idle without touching the published sample.

    Inputs:
        rst: synchronous reset of the whole core, published result included
        start: begin a cycle; only honoured while done is high
        channel: single-ended input AIN0..AIN3, sampled together with start

    Outputs:
        done: idle and ready for start
        sample: last successfully acquired code
        status: CycleStatus of the cycle in flight, or of the last one
        ack_err: the last cycle ended on an acknowledge error
        updated: high for one cycle when sample/status/ack_err have been rewritten
    '''
    def __init__(self, *, address=ADS1115_ADDRESS, gain=Gain.FSR_4V096,
                 data_rate=DataRate.SPS_128, conversion_wait=0, check_read_ack=False):
        if address not in ADS1115_ADDRESSES:
            raise ValueError("ADS1115 address must be one of {}, not {:#04x}"
                             .format(", ".join("{:#04x}".format(a) for a in ADS1115_ADDRESSES),
                                     address))
        if conversion_wait < 0:
            raise ValueError("conversion wait must be non-negative, not {}"
                             .format(conversion_wait))

        self.address         = address
        self.gain            = Gain(gain)
        self.data_rate       = DataRate(data_rate)
        self.conversion_wait = conversion_wait
        self.check_read_ack  = check_read_ack

        self.rst     = Signal()
        self.start   = Signal()
        self.channel = Signal(2)

        self.done    = Signal()
        self.sample  = Signal(signed(16))
        self.status  = Signal(CycleStatus)
        self.ack_err = Signal()
        self.updated = Signal()

        self.bus = I2CBusInterface(name="i2c")

        self.encoder = ConfigWordEncoder(gain=self.gain, data_rate=self.data_rate)
        self.result  = ResultRegister()

    def elaborate(self, platform):
        m = Module()

        m.submodules.encoder = encoder = self.encoder
        m.submodules.result = result = self.result

        bus = self.bus

        config  = Signal(16)
        working = Signal(16)
        ready   = Signal()

        m.d.comb += [
            encoder.channel.eq(self.channel),
            bus.addr.eq(self.address),
            ready.eq(bus.grant & ~bus.busy),
            result.w_sample.eq(working),
        ]

        def write_byte(data, last=0):
            m.d.comb += [
                bus.en.eq(1),
                bus.rw.eq(0),
                bus.data_w.eq(data),
                bus.last.eq(last),
            ]

        def read_byte(last=0):
            m.d.comb += [
                bus.en.eq(1),
                bus.rw.eq(1),
                bus.last.eq(last),
            ]

        def abort():
            m.d.comb += [
                result.abort.eq(1),
                result.w_ack_err.eq(1),
            ]
            m.next = "Idle"

        if self.conversion_wait:
            timer = Signal(range(self.conversion_wait + 1))

        with m.FSM() as fsm:
            with m.State("Idle"):
                with m.If(self.start):
                    m.d.sync += [
                        config.eq(encoder.word),
                        working.eq(0),
                    ]
                    m.next = "WritePointer(Config)"

            with m.State("WritePointer(Config)"):
                with m.If(ready):
                    write_byte(Pointer.CONFIG)
                    m.next = "WriteConfigMSB"

            with m.State("WriteConfigMSB"):
                with m.If(ready):
                    write_byte(config[8:16])
                    m.next = "WriteConfigLSB"

            with m.State("WriteConfigLSB"):
                with m.If(ready):
                    write_byte(config[0:8], last=1)
                    m.next = "AwaitConfigWrite"

            with m.State("AwaitConfigWrite"):
                with m.If(~bus.busy):
                    with m.If(bus.ack_err):
                        abort()
                    with m.Else():
                        m.next = "WritePointer(Conversion)"

            with m.State("WritePointer(Conversion)"):
                with m.If(ready):
                    write_byte(Pointer.CONVERSION, last=1)
                    m.next = "AwaitPointerWrite"

            with m.State("AwaitPointerWrite"):
                with m.If(~bus.busy):
                    with m.If(bus.ack_err):
                        abort()
                    with m.Else():
                        if self.conversion_wait:
                            m.d.sync += timer.eq(self.conversion_wait - 1)
                            m.next = "AwaitConversion"
                        else:
                            m.next = "BeginRead"

            if self.conversion_wait:
                with m.State("AwaitConversion"):
                    with m.If(timer == 0):
                        m.next = "BeginRead"
                    with m.Else():
                        m.d.sync += timer.eq(timer - 1)

            with m.State("BeginRead"):
                with m.If(ready):
                    read_byte()
                    m.next = "ReadMSB"

            with m.State("ReadMSB"):
                with m.If(ready):
                    m.d.sync += working[8:16].eq(bus.data_r)
                    read_byte(last=1)
                    m.next = "ReadLSB"

            with m.State("ReadLSB"):
                with m.If(~bus.busy):
                    m.d.sync += working[0:8].eq(bus.data_r)
                    m.next = "EndRead"

            with m.State("EndRead"):
                if self.check_read_ack:
                    with m.If(bus.ack_err):
                        abort()
                    with m.Else():
                        m.next = "Latch"
                else:
                    m.next = "Latch"

            with m.State("Latch"):
                m.d.comb += [
                    result.publish.eq(1),
                    result.w_ack_err.eq(0),
                ]
                m.next = "Idle"

        m.d.comb += [
            self.done.eq(fsm.ongoing("Idle")),
            bus.claim.eq(~fsm.ongoing("Idle")),
            self.sample.eq(result.sample),
            self.ack_err.eq(result.ack_err),
            self.updated.eq(result.updated),
        ]
        with m.If(fsm.ongoing("Idle")):
            m.d.comb += self.status.eq(result.status)
        with m.Else():
            m.d.comb += self.status.eq(CycleStatus.IN_PROGRESS)

        return ResetInserter(self.rst)(m)
