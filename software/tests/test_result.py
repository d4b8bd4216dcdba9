import unittest

from ads1115_acq.gateware.registers import CycleStatus
from ads1115_acq.gateware.result import ResultRegister

from .common import run_simulation


class ResultRegisterTestCase(unittest.TestCase):
    def test_publish_and_abort(self):
        dut = ResultRegister()

        async def bench(ctx):
            self.assertEqual(ctx.get(dut.status), CycleStatus.READY)
            self.assertIsInstance(ctx.get(dut.status), CycleStatus)

            ctx.set(dut.w_sample, -300)
            ctx.set(dut.publish, 1)
            await ctx.tick()
            ctx.set(dut.publish, 0)
            self.assertEqual(ctx.get(dut.sample), -300)
            self.assertEqual(ctx.get(dut.status), CycleStatus.COMPLETED)
            self.assertEqual(ctx.get(dut.ack_err), 0)
            self.assertEqual(ctx.get(dut.updated), 1)

            ctx.set(dut.w_sample, 555)
            ctx.set(dut.w_ack_err, 1)
            ctx.set(dut.abort, 1)
            await ctx.tick()
            ctx.set(dut.abort, 0)
            self.assertEqual(ctx.get(dut.sample), -300)
            self.assertEqual(ctx.get(dut.status), CycleStatus.ABORTED)
            self.assertEqual(ctx.get(dut.ack_err), 1)

            await ctx.tick()
            self.assertEqual(ctx.get(dut.updated), 0)
            self.assertEqual(ctx.get(dut.sample), -300)

        run_simulation(dut, bench)

    def test_hold_without_write(self):
        dut = ResultRegister()

        async def bench(ctx):
            ctx.set(dut.w_sample, 1)
            ctx.set(dut.w_ack_err, 1)
            for _ in range(5):
                await ctx.tick()
            self.assertEqual(ctx.get(dut.sample), 0)
            self.assertEqual(ctx.get(dut.ack_err), 0)
            self.assertEqual(ctx.get(dut.updated), 0)

        run_simulation(dut, bench)
