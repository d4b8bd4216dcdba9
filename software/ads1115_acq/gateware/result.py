from amaranth import *

from .registers import CycleStatus


__all__ = ["ResultRegister"]


class ResultRegister(Elaboratable):
    '''
    Inputs:
        publish: store w_sample, COMPLETED and w_ack_err
        abort: store ABORTED and w_ack_err, keep the previous sample
        w_sample, w_ack_err: write data

    Outputs:
        sample, status, ack_err: the last stored cycle outcome; all three change on the same
        clock edge, so a reader never pairs one cycle's sample with another cycle's status
        updated: high for one cycle after each store
    '''
    def __init__(self):
        self.publish   = Signal()
        self.abort     = Signal()
        self.w_sample  = Signal(signed(16))
        self.w_ack_err = Signal()

        self.sample    = Signal(signed(16))
        self.status    = Signal(CycleStatus, init=CycleStatus.READY)
        self.ack_err   = Signal()
        self.updated   = Signal()

    def elaborate(self, platform):
        m = Module()

        m.d.sync += self.updated.eq(self.publish | self.abort)

        with m.If(self.publish):
            m.d.sync += [
                self.sample.eq(self.w_sample),
                self.status.eq(CycleStatus.COMPLETED),
                self.ack_err.eq(self.w_ack_err),
            ]
        with m.Elif(self.abort):
            m.d.sync += [
                self.status.eq(CycleStatus.ABORTED),
                self.ack_err.eq(self.w_ack_err),
            ]

        return m
