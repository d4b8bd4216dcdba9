from amaranth import *


__all__ = ["I2CBusInterface", "BusArbiter"]


class I2CBusInterface:
    """
    Byte-level request/response port of an I2C transaction engine.

    Initiator side:
        en:     request strobe; a request is accepted on a cycle where ``en & ~busy``
        addr:   7-bit target address
        rw:     0 for write, 1 for read
        data_w: byte to write
        last:   finish the bus transaction with a STOP after this byte
        claim:  initiator wants exclusive use of the engine

    Engine side:
        busy:    high from the cycle after acceptance until the byte is complete
        data_r:  byte read, valid once busy falls
        ack_err: target did not acknowledge; sticky for every byte of one bus transaction,
                 cleared by the next START
        grant:   initiator owns the engine (high when the engine is not shared)
    """
    def __init__(self, name=None):
        prefix = "" if name is None else name + "__"

        self.en      = Signal(name=prefix + "en")
        self.addr    = Signal(7, name=prefix + "addr")
        self.rw      = Signal(name=prefix + "rw")
        self.data_w  = Signal(8, name=prefix + "data_w")
        self.last    = Signal(name=prefix + "last")
        self.claim   = Signal(name=prefix + "claim")

        self.busy    = Signal(name=prefix + "busy")
        self.data_r  = Signal(8, name=prefix + "data_r")
        self.ack_err = Signal(name=prefix + "ack_err")
        self.grant   = Signal(init=1, name=prefix + "grant")

    def request_signals(self):
        return [self.en, self.addr, self.rw, self.data_w, self.last, self.claim]

    def response_signals(self):
        return [self.busy, self.data_r, self.ack_err, self.grant]

    def connect(self, engine):
        """Statements wiring this initiator port to ``engine``, to be added to a comb domain."""
        return [
            *(theirs.eq(ours) for ours, theirs in
              zip(self.request_signals(), engine.request_signals())),
            *(ours.eq(theirs) for ours, theirs in
              zip(self.response_signals(), engine.response_signals())),
        ]


class BusArbiter(Elaboratable):
    '''
    Shares one transaction engine between several initiators.

    claim:  ___------------______
    grant:  ____-----------______
    owned:  ____------------_____  (held until the engine has gone idle)

    The lowest-numbered claimant wins when the bus is free. The owner keeps the engine for as
    long as it claims it, so a multi-transaction sequence is never interleaved with another
    initiator's requests.
    '''
    def __init__(self, count):
        if count < 1:
            raise ValueError("arbiter needs at least one port, not {}".format(count))
        self.ports = [I2CBusInterface(name="port{}".format(n)) for n in range(count)]
        self.bus = I2CBusInterface(name="engine")

        self.owner = Signal(range(max(count, 2)))
        self.owned = Signal()

    def elaborate(self, platform):
        m = Module()

        with m.If(~self.owned):
            for n, port in reversed(list(enumerate(self.ports))):
                with m.If(port.claim):
                    m.d.sync += [
                        self.owner.eq(n),
                        self.owned.eq(1),
                    ]
        with m.Else():
            owner_claim = Array(port.claim for port in self.ports)[self.owner]
            with m.If(~owner_claim & ~self.bus.busy):
                m.d.sync += self.owned.eq(0)

        m.d.comb += self.bus.claim.eq(self.owned)

        for n, port in enumerate(self.ports):
            granted = self.owned & (self.owner == n)
            m.d.comb += [
                port.grant.eq(granted),
                port.busy.eq(self.bus.busy),
                port.data_r.eq(self.bus.data_r),
                port.ack_err.eq(self.bus.ack_err),
            ]
            with m.If(granted):
                m.d.comb += [
                    self.bus.en.eq(port.en),
                    self.bus.addr.eq(port.addr),
                    self.bus.rw.eq(port.rw),
                    self.bus.data_w.eq(port.data_w),
                    self.bus.last.eq(port.last),
                ]

        return m
