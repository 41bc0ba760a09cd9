"""Atmospheric brightness temperature model for the SSM/I channels."""

from .channels import FrequencyChannel
from .rtm import AtmoParameters, RangeWarning, compute, compute_channel

__all__ = [
    "AtmoParameters",
    "FrequencyChannel",
    "RangeWarning",
    "compute",
    "compute_channel",
]
