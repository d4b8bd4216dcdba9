from .registers import *
from .bus import I2CBusInterface, BusArbiter
from .config_word import ConfigWordEncoder
from .result import ResultRegister
from .acquisition import ADS1115Acquisition
