from .bus_model import ADS1115BusModel
from .testbench import AcquisitionTestbench


__all__ = ["ADS1115BusModel", "AcquisitionTestbench"]
