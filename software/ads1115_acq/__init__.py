from .gateware import *
from .interface import ADS1115Interface, ADS1115Error, ADS1115AckError, ADS1115TimeoutError
