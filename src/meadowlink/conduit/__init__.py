"""
The conduit package provides an abstraction of a bi-directional stream to a device.
The concrete implementation is a serial port; DefaultConduit wraps arbitrary file-like streams.
"""
