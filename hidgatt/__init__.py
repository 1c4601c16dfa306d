"""Bluetooth LE codecs for HCI, L2CAP, ATT and SMP packets, HCI events, a GATT attribute database and LE legacy pairing functions."""

__version__ = "0.1.0"